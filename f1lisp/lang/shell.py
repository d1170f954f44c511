"""Handles interactive/command-line mode for the f1lisp interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """f1lisp interpreter shell."""
    intro = "f1lisp interpreter :: Python backend\nType 'help' for more information."
    prompt = "\U0001F3CE  > "
    secondary_prompt = ". "           # used for line continuations
    _tmp_prompt = "\U0001F3CE  > "    # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self.line_num = 0

    def parseline(self, line):
        """Only help, exit and EOF are commands. Anything else, including lines starting with '?' or '!', is f1lisp
        source and goes to default.
        """
        line = line.strip()
        command, __, arg = line.partition(" ")
        if command in ("help", "exit", "EOF"):
            return command, arg.strip(), line
        return None, None, line

    def default(self, line):
        """Evaluates arbitrary f1lisp source."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            self.sess.results.clear()
            self.sess.add(line + "\n", self.line_num)

            if self.sess.pending:
                self.prompt = self.secondary_prompt
                return

            if self.sess.results:
                print(self.sess.show(self.sess.pop()), file=self.stdout)

        self.prompt = self._tmp_prompt

    def do_help(self, arg):
        """Doesn't return docs, but rather a short intro."""
        print("Welcome to the f1lisp interpreter!\n\n"
              "f1lisp is a tiny LISP with integers, conditionals, global definitions and a \n"
              "handful of built-in procedures: print, exit, begin, +, -, * and /.\n\n"
              "Try it out by typing '(define x 10)'. This will bind 10 to the name 'x'. \n"
              "Next, try typing '(if x (* x x) 0)'. Only 0 is false, so this gives 100.\n"
              "Forms can span several lines: input continues until the brackets balance.",
              file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return False

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True

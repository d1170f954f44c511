import sys

from f1lisp.main import main


sys.exit(main())

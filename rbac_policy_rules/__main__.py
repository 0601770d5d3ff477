import sys

from .libs.main_app import main

if __name__ == "__main__":
    sys.exit(main())

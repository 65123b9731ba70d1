import sys

from xml_beautifier.cli.main import main

sys.exit(main())

import sys

from exam_variants.cli import main

sys.exit(main())

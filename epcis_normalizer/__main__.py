import sys

from epcis_normalizer.main import main

sys.exit(main())

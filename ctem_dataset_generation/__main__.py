import sys

from ctem_dataset_generation.generate_dataset import main

sys.exit(main())

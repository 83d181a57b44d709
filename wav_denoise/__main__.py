import sys

from wav_denoise.main import main

sys.exit(main())

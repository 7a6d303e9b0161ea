"""Allow ``python -m psdvault``."""
from psdvault.main import main

main()

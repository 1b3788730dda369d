"""Constants for modelops-cas."""

# Configuration file looked up in the working directory
CONFIG_FILE = ".modelops-cas.yaml"

# Environment variable overriding the configuration path
CONFIG_ENV_VAR = "MODELOPS_CAS_CONFIG"

# Page size used when collecting a tier's full listing
LIST_PAGE_SIZE = 1000

# Version
CAS_VERSION = "0.1.0"

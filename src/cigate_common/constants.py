"""Constants shared across cigate packages."""

CIGATE_HOME_DIR = ".cigate"
LOG_SUBDIR = "log"
STATE_SUBDIR = "state"

PROJECT_CONFIG_FILE = ".cigate.yaml"
USER_CONFIG_DIR = "cigate"
USER_CONFIG_FILE = "config.yaml"

DEFAULT_SHARED_COMPONENT = "dependencies"
DEFAULT_BRANCH = "main"

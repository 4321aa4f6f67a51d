import os

# Keep secret files of the developer's environment out of config loading
os.environ.pop("LANDSCAPE_SECRETS_DIR", None)

from tests.fixtures import *  # noqa: F401,F403,E402

"""
appdeploy Constants

Centralized defaults for remote layout, tooling and timeouts.
"""

# Local layout
DEFAULT_BRANCH = "main"
DEFAULT_WORKDIR = "."
DEFAULT_LOG_DIR = "."
LOG_FILENAME_FORMAT = "deploy_%Y%m%d_%H%M%S.log"
LOG_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Settings discovery
SETTINGS_FILENAME = "appdeploy.yml"
USER_SETTINGS_PATH = "~/.appdeploy/config.yml"
ENV_PREFIX = "APPDEPLOY"

# Remote layout
DEFAULT_CONTAINER_NAME = "app"
DEFAULT_REMOTE_DIR = "~/app"
NGINX_SITES_AVAILABLE = "/etc/nginx/sites-available"
NGINX_SITES_ENABLED = "/etc/nginx/sites-enabled"
# Catch-all site the nginx package enables on port 80
NGINX_DEFAULT_SITE = "default"
PROXY_LISTEN_PORT = 80

# Remote tooling
DEFAULT_COMPOSE_COMMAND = "docker-compose"
REQUIRED_PACKAGES = ["docker.io", "docker-compose", "nginx"]
REQUIRED_SERVICES = ["docker", "nginx"]
INSTALLED_STATUS = "install ok installed"

# Build descriptors (compose first: it wins when both kinds exist)
COMPOSE_FILENAMES = [
    "docker-compose.yml",
    "docker-compose.yaml",
    "compose.yml",
    "compose.yaml",
]
DOCKERFILE_NAME = "Dockerfile"

# SSH Timeout Configuration
SSH_CONNECTION_TIMEOUT = 5
SSH_OPTIONS = [
    "-o",
    "StrictHostKeyChecking=no",
    "-o",
    "LogLevel=QUIET",
]

# Transfer
RSYNC_EXCLUDE = [".git"]

# Post-deploy probe
PROBE_URL = "http://localhost"
PROBE_TIMEOUT = 10

# Secret masking
SECRET_MASK = "****"

# Local tools the run shells out to
REQUIRED_TOOLS = ["git", "ssh", "rsync"]

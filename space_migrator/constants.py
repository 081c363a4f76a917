"""Shared constants for the Space to Teams migration tool."""

# Throughput limits for the Graph migration API (per team, per second)
MESSAGES_PER_SECOND = 5
MESSAGE_SLEEP = 2

# Pause used while waiting for asynchronous provisioning on the Teams side
SETTLE_SLEEP = 5

# Shared retry budget for consecutive failed remote calls
RETRY_BUDGET = 10

# Source pagination
MESSAGE_BATCH_SIZE = 50
CHANNEL_PAGE_SIZE = 100

# Process exit codes
EXIT_OK = 0
EXIT_FATAL = 255

# Staging layout
STAGING_SCHEMA_VERSION = 1
STAGING_MANIFEST_FILE = "manifest.json"
CHANNEL_FILE = "channel.json"
MESSAGES_FILE = "messages.json"

# Channel name matching
CHANNEL_PREFIX_DELIMITER = "-"
GENERAL_CHANNEL_NAME = "General"

# Message authors
APPLICATION_PRINCIPAL_CLASS = "CApplicationPrincipalDetails"
DELETED_AUTHOR_NAME = "deleted"

# Graph API
GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
GRAPH_SCOPE = "https://graph.microsoft.com/.default"
AAD_TOKEN_URL = "https://login.microsoftonline.com/{tenant_id}/oauth2/v2.0/token"
TEAMS_TEMPLATE_BIND = "https://graph.microsoft.com/v1.0/teamsTemplates('standard')"
USER_BIND_TEMPLATE = "https://graph.microsoft.com/v1.0/users('{user_id}')"
MIGRATION_MODE = "migration"
DEFAULT_TEAM_DESCRIPTION = "Migration from JetBrains Space"

# Space API
SPACE_TOKEN_PATH = "/oauth/token"
SPACE_API_PATH = "/api/http"
SPACE_MESSAGE_SORTING = "FromOldestToNewest"

# HTTP
HTTP_TIMEOUT = 60
HTTP_RATE_LIMIT = 429
HTTP_SERVER_ERROR_MIN = 500

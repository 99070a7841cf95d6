"""User-facing message templates."""

CHECKING_FOR_UPDATE = "Checking for update..."
NO_UPDATE = "No update found."
NEW_VERSION = "New version found, but the script has no download URL."
UPDATING = "Updating..."
UPDATED = "Update downloaded."
ERROR_FETCHING_UPDATE_INFO = "Error fetching update info."
ERROR_FETCHING_SCRIPT = "Error fetching script."
GENERIC_ERROR = "Error:"
SCRIPT_UPDATED = 'Script "{name}" has been updated.'
RESOURCE_ERRORS = "Error fetching resources: {urls}"

TITLE_UPDATES = "Script updates"
TITLE_UPDATE_ERRORS = "Update errors"

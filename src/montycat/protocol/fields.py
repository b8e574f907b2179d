"""Protocol constants.

Keep these in one place to avoid stringly-typed message handling.
"""

# Envelope keys, in the order they appear on the wire.
SCHEMA = "schema"
USERNAME = "username"
PASSWORD = "password"
KEYSPACE = "keyspace"
STORE = "store"
PERSISTENT = "persistent"
DISTRIBUTED = "distributed"
LIMIT_OUTPUT = "limit_output"
KEY = "key"
VALUE = "value"
COMMAND = "command"
EXPIRE = "expire"
BULK_VALUES = "bulk_values"
BULK_KEYS = "bulk_keys"
BULK_KEYS_VALUES = "bulk_keys_values"
SEARCH_CRITERIA = "search_criteria"
WITH_POINTERS = "with_pointers"
KEY_INCLUDED = "key_included"
POINTERS_METADATA = "pointers_metadata"
VOLUMES = "volumes"
LATEST_VOLUME = "latest_volume"

# Administrative envelope keys.
RAW = "raw"
CREDENTIALS = "credentials"

# Record side-channels.
POINTERS = "pointers"
TIMESTAMPS = "timestamps"

# Temporal discriminants.
RANGE_TIMESTAMP = "range_timestamp"
AFTER_TIMESTAMP = "after_timestamp"
BEFORE_TIMESTAMP = "before_timestamp"

# Data-plane commands.
GET_VALUE = "get_value"
GET_BULK = "get_bulk"
GET_KEYS = "get_keys"
GET_LEN = "get_len"
DELETE_KEY = "delete_key"
DELETE_BULK = "delete_bulk"
INSERT_VALUE = "insert_value"
INSERT_BULK = "insert_bulk"
INSERT_CUSTOM_KEY = "insert_custom_key"
INSERT_CUSTOM_KEY_VALUE = "insert_custom_key_value"
UPDATE_VALUE = "update_value"
UPDATE_BULK = "update_bulk"
LOOKUP_KEYS = "lookup_keys"
LOOKUP_VALUES = "lookup_values"
LIST_ALL_DEPENDING_KEYS = "list_all_depending_keys"
LIST_ALL_SCHEMAS_IN_KEYSPACE = "list_all_schemas_in_keyspace"
SUBSCRIBE = "subscribe"

# The server streams replies for these commands instead of sending one line.
SUBSCRIPTION_COMMANDS = frozenset((SUBSCRIBE,))

# Any encoded request containing this text is treated as a subscription
# when no explicit flag accompanies it.
SUBSCRIPTION_MARKER = b"subscribe"

# Administrative commands, carried as the first token of a raw envelope.
CREATE_STORE = "create-store"
REMOVE_STORE = "remove-store"
CREATE_KEYSPACE = "create-keyspace"
REMOVE_KEYSPACE = "remove-keyspace"
CREATE_OWNER = "create-owner"
REMOVE_OWNER = "remove-owner"
LIST_OWNERS = "list-owners"
GRANT_TO = "grant-to"
REVOKE_FROM = "revoke-from"
GET_STRUCTURE_AVAILABLE = "get-structure-available"
ENFORCE_SCHEMA = "enforce-schema"
REMOVE_ENFORCED_SCHEMA = "remove-enforced-schema"
DO_SNAPSHOTS = "do-snapshots-for-keyspace"
CLEAN_SNAPSHOTS = "clean-snapshots-for-keyspace"
STOP_SNAPSHOTS = "stop-snapshots-for-keyspace"
UPDATE_CACHE_COMPRESSION = "update-cache-compression"

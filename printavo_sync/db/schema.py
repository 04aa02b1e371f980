"""
DDL for the local SQLite store.

Statements are executed one at a time by ConnDB.initialize(); every one is
idempotent so startup can run them unconditionally.
"""

MERCHANTS_TABLE = """
CREATE TABLE IF NOT EXISTS merchants (
    shop TEXT PRIMARY KEY,
    printavo_api_key TEXT DEFAULT '',
    sync_enabled INTEGER DEFAULT 1,
    sync_mode TEXT DEFAULT 'all',
    included_tags TEXT DEFAULT '',
    exclude_tag TEXT DEFAULT 'no-printavo',
    require_include_tag INTEGER DEFAULT 0,
    include_tag TEXT DEFAULT 'printavo',
    respect_line_item_skip INTEGER DEFAULT 0,
    line_item_skip_property TEXT DEFAULT 'printavo_skip',
    skip_gift_cards INTEGER DEFAULT 1,
    skip_non_physical INTEGER DEFAULT 1,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
)
"""

# The unique key is the only concurrency control for duplicate webhooks
ORDER_MAPPINGS_TABLE = """
CREATE TABLE IF NOT EXISTS order_mappings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    shop TEXT NOT NULL,
    shopify_order_id TEXT NOT NULL,
    shopify_order_name TEXT,
    printavo_quote_id TEXT NOT NULL,
    printavo_contact_id TEXT NOT NULL,
    printavo_customer_id TEXT,
    created_at TEXT NOT NULL,
    UNIQUE (shop, shopify_order_id)
)
"""

ACTIVITY_LOGS_TABLE = """
CREATE TABLE IF NOT EXISTS activity_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    shop TEXT NOT NULL,
    order_id TEXT,
    order_name TEXT,
    status TEXT NOT NULL,
    message TEXT,
    created_at TEXT NOT NULL
)
"""

SCHEMA_STATEMENTS = [
    MERCHANTS_TABLE,
    ORDER_MAPPINGS_TABLE,
    ACTIVITY_LOGS_TABLE,
    "CREATE INDEX IF NOT EXISTS idx_activity_shop ON activity_logs(shop)",
    "CREATE INDEX IF NOT EXISTS idx_activity_created ON activity_logs(created_at)",
]

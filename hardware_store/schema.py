# hardware_store/schema.py
import logging
from typing import Dict, List

from hardware_store.config import Settings
from hardware_store.database import Database
from hardware_store.errors import BackendError
from hardware_store.utils.hashing import get_password_hash

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    "Plumbing Supplies",
    "Electrical Supplies",
    "Tools",
    "Fasteners",
    "Pipes & Fittings",
    "Valves",
    "Pumps",
    "Safety Equipment",
    "Other",
]

# Tables are listed so that referenced tables come before the tables pointing at them
SQLITE_TABLES: List[str] = [
    """CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT UNIQUE NOT NULL,
        email TEXT,
        password TEXT NOT NULL,
        role TEXT DEFAULT 'staff',
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )""",
    """CREATE TABLE IF NOT EXISTS staff (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        email TEXT,
        phone TEXT,
        position TEXT,
        department TEXT,
        hire_date DATE,
        salary DECIMAL(10,2),
        status TEXT DEFAULT 'active',
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )""",
    """CREATE TABLE IF NOT EXISTS categories (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE COLLATE NOCASE,
        description TEXT,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )""",
    """CREATE TABLE IF NOT EXISTS inventory (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        description TEXT,
        category_id INTEGER,
        sku TEXT UNIQUE,
        quantity INTEGER DEFAULT 0,
        min_quantity INTEGER DEFAULT 0,
        unit_price DECIMAL(10,2) DEFAULT 0,
        supplier TEXT,
        location TEXT,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (category_id) REFERENCES categories (id)
    )""",
    """CREATE TABLE IF NOT EXISTS sales (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        item_id INTEGER,
        quantity INTEGER,
        unit_price DECIMAL(10,2),
        total_price DECIMAL(10,2),
        customer_name TEXT,
        customer_phone TEXT,
        staff_id INTEGER,
        sale_date DATETIME DEFAULT CURRENT_TIMESTAMP,
        payment_method TEXT,
        notes TEXT,
        FOREIGN KEY (item_id) REFERENCES inventory (id),
        FOREIGN KEY (staff_id) REFERENCES staff (id)
    )""",
    """CREATE TABLE IF NOT EXISTS budget (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        category TEXT NOT NULL,
        amount DECIMAL(10,2) NOT NULL,
        spent DECIMAL(10,2) DEFAULT 0,
        month_year TEXT NOT NULL,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )""",
    """CREATE TABLE IF NOT EXISTS transactions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        type TEXT NOT NULL,
        amount DECIMAL(10,2),
        description TEXT,
        category TEXT,
        date DATETIME DEFAULT CURRENT_TIMESTAMP,
        staff_id INTEGER,
        FOREIGN KEY (staff_id) REFERENCES staff (id)
    )""",
]

# Columns added after the first release; sqlite has no ADD COLUMN IF NOT EXISTS,
# so these simply fail on an up-to-date file and the failure is ignored.
SQLITE_UPGRADES: List[str] = [
    "ALTER TABLE users ADD COLUMN email TEXT",
    "ALTER TABLE inventory ADD COLUMN description TEXT",
    "ALTER TABLE inventory ADD COLUMN sku TEXT",
    "ALTER TABLE inventory ADD COLUMN min_quantity INTEGER DEFAULT 0",
    "ALTER TABLE inventory ADD COLUMN updated_at DATETIME",
    "ALTER TABLE sales ADD COLUMN notes TEXT",
    "CREATE UNIQUE INDEX IF NOT EXISTS ux_categories_name ON categories (name COLLATE NOCASE)",
]

POSTGRES_TABLES: List[str] = [
    """CREATE TABLE IF NOT EXISTS users (
        id SERIAL PRIMARY KEY,
        username VARCHAR(50) UNIQUE NOT NULL,
        email VARCHAR(100),
        password VARCHAR(255) NOT NULL,
        role VARCHAR(20) DEFAULT 'staff',
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",
    """CREATE TABLE IF NOT EXISTS staff (
        id SERIAL PRIMARY KEY,
        name VARCHAR(100) NOT NULL,
        email VARCHAR(100),
        phone VARCHAR(20),
        position VARCHAR(100),
        department VARCHAR(100),
        hire_date DATE,
        salary DECIMAL(10,2),
        status VARCHAR(20) DEFAULT 'active',
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",
    """CREATE TABLE IF NOT EXISTS categories (
        id SERIAL PRIMARY KEY,
        name VARCHAR(100) UNIQUE NOT NULL,
        description TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",
    """CREATE TABLE IF NOT EXISTS inventory (
        id SERIAL PRIMARY KEY,
        name VARCHAR(200) NOT NULL,
        description TEXT,
        category_id INTEGER REFERENCES categories(id),
        sku VARCHAR(100) UNIQUE,
        quantity INTEGER DEFAULT 0,
        min_quantity INTEGER DEFAULT 0,
        unit_price DECIMAL(10,2) DEFAULT 0.00,
        supplier VARCHAR(200),
        location VARCHAR(100),
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",
    """CREATE TABLE IF NOT EXISTS sales (
        id SERIAL PRIMARY KEY,
        item_id INTEGER REFERENCES inventory(id),
        quantity INTEGER NOT NULL,
        unit_price DECIMAL(10,2) NOT NULL,
        total_price DECIMAL(10,2) NOT NULL,
        customer_name VARCHAR(200),
        customer_phone VARCHAR(20),
        staff_id INTEGER REFERENCES staff(id),
        sale_date TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        payment_method VARCHAR(50),
        notes TEXT
    )""",
    """CREATE TABLE IF NOT EXISTS budget (
        id SERIAL PRIMARY KEY,
        category VARCHAR(100) NOT NULL,
        amount DECIMAL(10,2) NOT NULL,
        spent DECIMAL(10,2) DEFAULT 0.00,
        month INTEGER NOT NULL,
        year INTEGER NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        UNIQUE(category, month, year)
    )""",
    """CREATE TABLE IF NOT EXISTS transactions (
        id SERIAL PRIMARY KEY,
        type VARCHAR(20) NOT NULL,
        amount DECIMAL(10,2),
        description TEXT,
        category VARCHAR(100),
        date TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        staff_id INTEGER REFERENCES staff(id)
    )""",
]

# Renames run before the matching ADD COLUMN so legacy data is kept
POSTGRES_UPGRADES: List[str] = [
    "ALTER TABLE inventory RENAME COLUMN minimum_stock TO min_quantity",
    "ALTER TABLE inventory ADD COLUMN IF NOT EXISTS min_quantity INTEGER DEFAULT 0",
    "ALTER TABLE inventory ADD COLUMN IF NOT EXISTS description TEXT",
    "ALTER TABLE inventory ADD COLUMN IF NOT EXISTS sku VARCHAR(100)",
    "ALTER TABLE sales ADD COLUMN IF NOT EXISTS notes TEXT",
    "ALTER TABLE users ADD COLUMN IF NOT EXISTS email VARCHAR(100)",
    "ALTER TABLE users ALTER COLUMN email DROP NOT NULL",
    "ALTER TABLE budget RENAME COLUMN allocated_amount TO amount",
    "ALTER TABLE budget RENAME COLUMN spent_amount TO spent",
    "CREATE UNIQUE INDEX IF NOT EXISTS ux_categories_name_lower ON categories (LOWER(TRIM(name)))",
]

SCHEMAS: Dict[str, Dict[str, List[str]]] = {
    "sqlite": {"tables": SQLITE_TABLES, "upgrades": SQLITE_UPGRADES},
    "postgresql": {"tables": POSTGRES_TABLES, "upgrades": POSTGRES_UPGRADES},
}


def create_tables(db: Database) -> None:
    with db.transaction() as unit:
        for statement in SCHEMAS[db.dialect]["tables"]:
            unit.run(statement)


def apply_upgrades(db: Database) -> int:
    """Run every upgrade in its own unit; returns how many went through."""
    applied = 0
    for statement in SCHEMAS[db.dialect]["upgrades"]:
        try:
            db.run(statement)
            applied += 1
        except BackendError as e:
            logger.debug("Schema upgrade skipped (%s): %s", e.code, statement)
    return applied


def seed_defaults(db: Database, settings: Settings) -> None:
    with db.transaction() as unit:
        for name in DEFAULT_CATEGORIES:
            unit.run(
                "INSERT INTO categories (name) SELECT ? "
                "WHERE NOT EXISTS (SELECT 1 FROM categories WHERE LOWER(TRIM(name)) = LOWER(?))",
                [name, name],
            )

    username = settings.DEFAULT_ADMIN_USERNAME
    if db.get("SELECT id FROM users WHERE username = ?", [username]) is None:
        db.run(
            "INSERT INTO users (username, password, role) SELECT ?, ?, ? "
            "WHERE NOT EXISTS (SELECT 1 FROM users WHERE username = ?)",
            [username, get_password_hash(settings.DEFAULT_ADMIN_PASSWORD), "admin", username],
        )
        logger.info("Default administrator '%s' created", username)


def init_db(db: Database, settings: Settings) -> None:
    create_tables(db)
    apply_upgrades(db)
    seed_defaults(db, settings)
    logger.info("Database initialized successfully (%s)", db.dialect)

'''
    File Name: config.py
    Version: 2.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
'''

from pathlib import Path
import logging
import os

# Project paths & files
BASE_DIR = Path(__file__).resolve().parent
DATA_DIR = BASE_DIR / "data"
DB_FILENAME = "pocket_finance.db"
DATABASE_PATH = DATA_DIR / DB_FILENAME   # Path object

# App metadata
APP_NAME = "Pocket Finance"
APP_VERSION = "2.0.0"

# Current user (storage is namespaced per email)
DEFAULT_USER_EMAIL = "user@example.com"
USER_EMAIL = os.environ.get("POCKET_FINANCE_USER", DEFAULT_USER_EMAIL)

# UI / formatting
DEFAULT_CURRENCY = "R$"
STYLESHEET_PATH = BASE_DIR / "resources" / "styles.qss"
MONTH_LABELS = [
    "Jan", "Fev", "Mar", "Abr", "Mai", "Jun",
    "Jul", "Ago", "Set", "Out", "Nov", "Dez",
]

# Fallback labels for unresolved references
OTHER_CATEGORY_LABEL = "Outros"
UNKNOWN_ESTABLISHMENT_LABEL = "Estabelecimento desconhecido"
MISSING_REFERENCE_LABEL = "N/A"

# Indicator engine
WINDOW_MONTHS = 6
TREND_UP_FACTOR = 1.10
TREND_DOWN_FACTOR = 0.90
TOP_ESTABLISHMENTS = 3
TOP_CATEGORIES_CHART = 10

# Defaults
DEFAULT_ESTABLISHMENT_CATEGORIES = [
    "Supermercado", "Restaurante", "Lanchonete", "Fast Food", "Farmácia",
    "Governo", "Tecnologia", "Serviços", "Posto de Gasolina",
    "Loja de Roupas", "Outros",
]

# Logging (simple default; modules can call logging.basicConfig(**config))
LOGGING_CONFIG = {
    "level": logging.INFO,
    "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
}

# Helpers
def ensure_data_dir():
    """
    Ensure the data directory exists. Database creation should be handled
    by the database manager (see `database.db_manager.DatabaseManager`).
    """
    DATA_DIR.mkdir(parents=True, exist_ok=True)

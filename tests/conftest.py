import os
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("SHOP_B_DOMAIN", "shop-b.myshopify.com")
os.environ.setdefault("SHOP_B_STOREFRONT_TOKEN", "storefront_token_b")
os.environ.setdefault("SHOP_C_DOMAIN", "shop-c.myshopify.com")
os.environ.setdefault("SHOP_C_STOREFRONT_TOKEN", "storefront_token_c")
os.environ.setdefault("SHOP_PRIORITY", "B,C")
os.environ.setdefault("MAPPING_FILE_PATH", str(ROOT_DIR / "tests" / "missing_mapping.json"))
os.environ.setdefault("ALLOWED_ORIGINS", "https://merveillesparis.fr,https://www.merveillesparis.fr")

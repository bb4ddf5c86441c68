import os
from decimal import Decimal
from dotenv import load_dotenv

# Загрузка .env
load_dotenv()

# База данных
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///rank_engine.db")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Делители Case Credit (правила FBO)
RETAIL_DIVISOR = Decimal(os.getenv("RETAIL_DIVISOR", "346"))
WHOLESALE_DIVISOR = Decimal(os.getenv("WHOLESALE_DIVISOR", "242"))

# Точность CC
CC_DECIMAL_PLACES = int(os.getenv("CC_DECIMAL_PLACES", "3"))
CC_QUANTUM = Decimal(1).scaleb(-CC_DECIMAL_PLACES)  # 0.001

# Сумма продажи хранится в DECIMAL(14,2)
AMOUNT_QUANTUM = Decimal("0.01")
MAX_SALE_AMOUNT = Decimal(os.getenv("MAX_SALE_AMOUNT", "999999999999.99"))

import os

# Upstream API endpoints of the tobacco management server
API_BASE_URL: str = os.getenv(
    "API_BASE_URL", "https://tobacco-management-system-server-98pz.onrender.com/api/v1"
)
SALES_API_URL: str = os.getenv("SALES_API_URL", f"{API_BASE_URL}/fetch/sale")
DISPATCH_API_URL: str = os.getenv("DISPATCH_API_URL", f"{API_BASE_URL}/fetch/dispatch")
REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))

# Record table
DEFAULT_PAGE_SIZE: int = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
MAX_PAGE_SIZE: int = int(os.getenv("MAX_PAGE_SIZE", "100"))

# "2/4/2025" is read as 4 February unless day-first is requested
SLASH_DATES_DAY_FIRST: bool = os.getenv("SLASH_DATES_DAY_FIRST", "False").lower() in ("true", "1", "t")

# Report letterhead
ORGANISATION_NAME: str = os.getenv("ORGANISATION_NAME", "EASTERN TOBACCO ASSOCIATION")
SYSTEM_NAME: str = os.getenv("SYSTEM_NAME", "Tobacco Inventory Management System")

# Comprehensive schedule deductions, as fractions of total sales
COMMISSION_RATE: float = float(os.getenv("COMMISSION_RATE", "0.0"))
LOAN_RATE: float = float(os.getenv("LOAN_RATE", "0.23"))

REPORTS_OUTPUT_DIR: str = os.getenv("REPORTS_OUTPUT_DIR", "./reports")

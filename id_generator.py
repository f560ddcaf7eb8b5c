import secrets
import string

from models.company import Company

COMPANY_CODE_PREFIX = "COMP"
MAX_ATTEMPTS = 20


def random_company_code() -> str:
    """COMP followed by six random digits, e.g. COMP042917."""
    digits = ''.join(secrets.choice(string.digits) for _ in range(6))
    return f"{COMPANY_CODE_PREFIX}{digits}"


def next_company_code(session) -> str:
    """
    Generates a company code not yet used by any company.
    The unique constraint on companies.company_code still guards the insert.
    """
    for _ in range(MAX_ATTEMPTS):
        code = random_company_code()
        exists = session.query(Company.id).filter_by(company_code=code).first()
        if not exists:
            return code
    raise RuntimeError("Could not allocate a free company code")

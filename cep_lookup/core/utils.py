import re

_NON_DIGIT = re.compile(r"\D")
_CEP_PARTS = re.compile(r"^(\d{5})(\d{3})$")

def clean_cep(cep: str) -> str:
    """Drop everything that is not a digit ("01310-100" -> "01310100")."""
    return _NON_DIGIT.sub("", cep or "")

def is_valid_cep_format(cep: str) -> bool:
    return len(clean_cep(cep)) == 8

def format_cep(cep: str) -> str:
    """
    Hyphenate a CEP as NNNNN-NNN.
    Anything that does not clean to exactly 8 digits comes back as bare digits.
    """
    return _CEP_PARTS.sub(r"\1-\2", clean_cep(cep))

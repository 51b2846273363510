from typing import Protocol, Any, Optional
from dataclasses import dataclass

# ----- Data shapes (thin & explicit) -----

@dataclass(frozen=True)
class Address:
    cep: str                          # as returned upstream, e.g. "01310-100"
    street: str
    district: str
    city: str
    uf: str                           # federative unit, e.g. "SP"
    complement: Optional[str] = None
    number: Optional[str] = None      # never filled by the lookup itself

# ----- Protocols (interfaces) -----

class CepClient(Protocol):
    async def lookup(self, cep: str) -> Any:
        """
        Fetch the raw JSON body for an 8-digit CEP.
        Raises httpx errors on transport faults or non-2xx status,
        ValueError when the body is not JSON.
        """
        ...

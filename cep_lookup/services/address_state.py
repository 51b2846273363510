import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional

from ..core.utils import clean_cep
from ..data.base import Address
from .lookup_service import CepLookupService

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR = "Erro inesperado ao buscar CEP"


@dataclass(frozen=True)
class AddressState:
    address: Optional[Address] = None
    loading: bool = False
    error: Optional[str] = None


Listener = Callable[[AddressState], None]


class AddressLookupStore:
    """
    Transient lookup state for a single consumer (one form, one screen, ...).

    Holds address/loading/error, and pushes a fresh AddressState snapshot to
    every subscriber after each change. address and error are never both set.
    Instances are not shared; create one per consumer and drop it afterwards.
    """
    def __init__(self, service: CepLookupService | None = None):
        self.service = service or CepLookupService()
        self._state = AddressState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> AddressState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns the matching unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _set(self, **changes) -> None:
        new = replace(self._state, **changes)
        if new == self._state:
            return
        self._state = new
        for listener in list(self._listeners):
            listener(new)

    async def fetch_address(self, cep: str) -> None:
        self._set(error=None, address=None, loading=True)
        try:
            result = await self.service.fetch_address(cep)
            if result.ok:
                self._set(address=result.address)
            else:
                self._set(error=result.error.message)
        except Exception:
            logger.exception("Unexpected failure while looking up CEP")
            self._set(address=None, error=UNEXPECTED_ERROR)
        finally:
            # also runs on cancellation
            self._set(loading=False)

    def clear_address(self) -> None:
        self._set(address=None, error=None)

    def clear_error(self) -> None:
        self._set(error=None)


_UNSET = object()


class AutoFetchWatcher:
    """
    Re-runs the lookup whenever the watched CEP or enabled flag changes.

    A complete CEP (8 digits) with enabled=True triggers store.fetch_address,
    anything else clears the address. Calling update() with unchanged values
    is a no-op, except for the very first evaluation.
    """
    def __init__(self, store: AddressLookupStore, cep: str = "", enabled: bool = True):
        self.store = store
        self.cep = cep
        self.enabled = enabled
        self._evaluated = False

    async def update(self, cep=_UNSET, enabled=_UNSET) -> None:
        new_cep = self.cep if cep is _UNSET else cep
        new_enabled = self.enabled if enabled is _UNSET else enabled
        changed = (new_cep, new_enabled) != (self.cep, self.enabled)
        self.cep, self.enabled = new_cep, new_enabled
        if changed or not self._evaluated:
            self._evaluated = True
            await self._evaluate()

    async def _evaluate(self) -> None:
        if self.enabled and self.cep and len(clean_cep(self.cep)) == 8:
            await self.store.fetch_address(self.cep)
        else:
            self.store.clear_address()

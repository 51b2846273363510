import asyncio
import json

import httpx
import pytest

from cep_lookup.data.viacep_client import HttpViaCep
from cep_lookup.services.lookup_service import CepLookupService

BASE_URL = "https://viacep.test/ws"

PAULISTA = {
    "cep": "01310-100",
    "logradouro": "Avenida Paulista",
    "complemento": "de 612 a 1510 - lado par",
    "bairro": "Bela Vista",
    "localidade": "São Paulo",
    "uf": "SP",
    "ibge": "3550308",
    "gia": "1004",
    "ddd": "11",
    "siafi": "7107",
}


class FakeViaCep:
    """
    Routes GET <base>/<cep>/json/ to canned bodies.
    Unknown CEPs answer {"erro": true} the way ViaCEP does.
    """
    def __init__(self, bodies=None, delays=None, status=200):
        self.bodies = bodies or {}
        self.delays = delays or {}
        self.status = status
        self.calls = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        cep = request.url.path.strip("/").split("/")[-2]
        self.calls.append(cep)
        if cep in self.delays:
            await asyncio.sleep(self.delays[cep])
        body = self.bodies.get(cep, {"erro": True})
        if isinstance(body, (bytes, str)):
            return httpx.Response(self.status, content=body)
        return httpx.Response(self.status, content=json.dumps(body).encode("utf-8"),
                              headers={"Content-Type": "application/json"})


@pytest.fixture
def upstream():
    return FakeViaCep(bodies={"01310100": PAULISTA})


@pytest.fixture
def make_service():
    def _make(fake, timeout_ms=5000):
        client = HttpViaCep(BASE_URL, transport=httpx.MockTransport(fake))
        return CepLookupService(client=client, timeout_ms=timeout_ms)
    return _make

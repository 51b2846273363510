from pydantic import BaseModel, Field

class AddressOut(BaseModel):
    cep: str
    street: str
    complement: str | None = None
    district: str
    city: str
    uf: str = Field(min_length=2, max_length=2)
    number: str | None = None

class CepLookupResponse(BaseModel):
    cep: str                 # formatted NNNNN-NNN
    address: AddressOut

class BatchRequest(BaseModel):
    ceps: list[str] = Field(min_length=1)

class BatchItem(BaseModel):
    input: str
    address: AddressOut | None = None
    error: str | None = None     # LookupErrorKind name
    message: str | None = None   # user-facing text for the error

class BatchResponse(BaseModel):
    results: list[BatchItem]

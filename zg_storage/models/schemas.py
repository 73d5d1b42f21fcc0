from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    root_hash: str = Field(..., alias="rootHash", description="Root hash of the uploaded file's Merkle tree.")
    transaction_hash: str = Field(
        ..., alias="transactionHash", description="Hash of the transaction that registered the file on chain."
    )


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Human-readable failure message.")

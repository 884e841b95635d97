from pydantic import BaseModel, Field, field_validator


class SendMessageRequest(BaseModel):
    chat_id: int = Field(..., gt=0, strict=True)
    message_content: str

    @field_validator("message_content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message content cannot be empty.")
        return v

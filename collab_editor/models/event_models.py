from pydantic import BaseModel, Field, field_validator


# Field aliases match the camelCase keys the browser sends.

class JoinPayload(BaseModel):
    room_id: str = Field(alias="roomId", min_length=1)
    user_name: str = Field(alias="userName", min_length=1)


class CodeChangePayload(BaseModel):
    code: str


class LanguageChangePayload(BaseModel):
    language: str = Field(min_length=1)


class CompilePayload(BaseModel):
    code: str
    language: str = Field(min_length=1)
    version: str = "*"
    stdin: str = Field(default="", alias="input")

    @field_validator("version", mode="before")
    @classmethod
    def default_version(cls, value):
        return "*" if value is None else value

    @field_validator("stdin", mode="before")
    @classmethod
    def default_stdin(cls, value):
        return "" if value is None else value


class RunCodeRequest(BaseModel):
    code: str
    language: str = Field(min_length=1)
    version: str = "*"
    stdin: str = ""

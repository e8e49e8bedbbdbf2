from pydantic import BaseModel


class Message(BaseModel):
    message: str


class PublishState(Message):
    is_published: bool

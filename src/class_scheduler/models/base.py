'''
Shared pydantic configuration for every API model.
'''
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """
    Base model for the JSON API. Fields are snake_case in Python and
    camelCase on the wire (sessionsPerWeek, timePerDay, meetLink...);
    either spelling is accepted on input.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

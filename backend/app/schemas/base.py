"""Schema Base — camelCase wire format for every request model.

Design Decisions:
    - alias_generator=to_camel with populate_by_name: clients send productId,
      Python code reads product_id, tests may use either
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore",
    )

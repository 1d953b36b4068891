"""
Tools answered by the connected client.

The agent model fills in the arguments; the agent node forwards the call over
the bridge and the client (a local stub or a human) supplies the response.
These tools have no in-process implementation, so each one is only an
OpenAI-format function schema built from its pydantic args model.
"""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, Field


def client_tool_schema(name: str, description: str, args_schema: type[BaseModel]) -> dict[str, Any]:
    """Function schema accepted by `bind_tools`; nothing is callable in-process."""
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": args_schema.model_json_schema(),
        },
    }


class OrganizeItemsInput(BaseModel):
    items: str = Field(description="Stringified JSON array of the items to rearrange")
    instruction: str = Field(description="How the items should be ordered or grouped")


class FilterDataInput(BaseModel):
    data: str = Field(description="Stringified JSON array of objects to filter")
    field: str = Field(description="Name of the field to filter on")
    condition: str = Field(description="Condition the field value must satisfy, e.g. '> 10' or 'Books'")


class GetTablesInput(BaseModel):
    table_names: list[str] = Field(
        description="The most relevant table names, chosen only from the names provided"
    )


class DataRetrieverInput(BaseModel):
    query: str = Field(description="A PostgreSQL query that retrieves the requested data")


class CreateChartInput(BaseModel):
    labels: list[str] = Field(description="Label for each data point")
    data: list[Union[float, str]] = Field(description="Value for each label, in the same order")
    chartType: str = Field(description="Chart type, e.g. line, bar, pie")


class GenerateInsightInput(BaseModel):
    data: str = Field(description="Stringified JSON data to analyse")


organize_items_tool = client_tool_schema(
    "organizeItems",
    "Rearrange the items of an array as requested by the user. Returns the reordered array.",
    OrganizeItemsInput,
)

filter_data_tool = client_tool_schema(
    "filterData",
    "Filter an array of objects on one field. Returns the filtered array of objects.",
    FilterDataInput,
)

get_tables_tool = client_tool_schema(
    "getTables",
    "Select the database tables most relevant to the user's request.",
    GetTablesInput,
)

data_retriever_tool = client_tool_schema(
    "dataRetriever",
    "Run a PostgreSQL query against the client's database and return the rows as JSON.",
    DataRetrieverInput,
)

create_chart_tool = client_tool_schema(
    "createChart",
    "Build chart data (labels, data, chart type) for a JavaScript charting component.",
    CreateChartInput,
)

generate_insight_tool = client_tool_schema(
    "generateInsight",
    "Produce a short business insight from retrieved data.",
    GenerateInsightInput,
)

"""Region -> host -> service drill-down.

Three chained variables: a static region list, a host query filtered by
region, and a multi-select service query filtered by host. Picking a new
region re-selects the first host, which in turn selects every service.
"""

import asyncio
import logging

from dashvars.model.types import SortMode, VariableKind
from dashvars.model.variables import Variable
from dashvars.resolve import ExecutionFailure, open_session

# -- Fake backend ------------------------------------------------------------
HOSTS = {
    "eu": ["eu-web-2", "eu-web-1"],
    "us": ["us-web-1", "us-db-1"],
}
SERVICES = {
    "eu-web-1": ["nginx", "api"],
    "eu-web-2": ["nginx"],
    "us-db-1": ["postgres"],
    "us-web-1": ["nginx", "api", "worker"],
}


class DemoExecutor:
    async def execute(self, query, variables):
        await asyncio.sleep(0.01)
        if query.startswith("hosts"):
            return HOSTS.get(variables["region"], [])
        if query.startswith("services"):
            return SERVICES.get(variables["host"], [])
        raise ExecutionFailure(f"Syntax error: unknown query {query!r}")


VARIABLES = [
    Variable(
        id="1", name="region", kind=VariableKind.CUSTOM,
        custom_values="eu, us", selected_value="eu",
    ),
    Variable(
        id="2", name="host", kind=VariableKind.QUERY,
        query_template="hosts where region = {{ .region }}",
        selected_value="eu-web-1", sort_mode=SortMode.ASC,
    ),
    Variable(
        id="3", name="service", kind=VariableKind.QUERY,
        query_template="services where host = {{.host}}",
        selected_value=["nginx", "api"], all_selected=True,
        multi_select=True, show_all_option=True, sort_mode=SortMode.ASC,
    ),
]


def show(session):
    for name in session.variables:
        view = session.view(name)
        print(f"  ${name:<8} {view.display_value!s:<24} options={view.options}")


async def main():
    session = await open_session(VARIABLES, DemoExecutor())
    session.subscribe(lambda event: print(f"  -> {event.name} = {event.value}"))

    print("initial:")
    show(session)

    print("pick region=us:")
    session.change("region", "us")
    await session.settle()
    show(session)

    await session.aclose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())

"""Example: execute a SELECT query against a live GraphDB repository."""
from __future__ import annotations

import asyncio

from sf_graphdb import GraphDBClient, ResultMapper

from helpers import DEMO_GRAPH, build_client, load_demo_config


async def main(client: GraphDBClient | None = None) -> list[dict]:
    if client is None:
        load_demo_config()
        client = build_client()

    sparql = f"SELECT ?s ?p ?o WHERE {{ GRAPH <{DEMO_GRAPH}> {{ ?s ?p ?o }} }} LIMIT 10"
    print("SPARQL:\n", sparql, "\n", sep="")

    results = await client.select(sparql, trace_id="demo-select")
    mapped = ResultMapper().map_result_set(results)
    if not mapped:
        print("No rows matched the query.")
    else:
        print("Query results:")
        for row in mapped:
            print(row)
    return mapped


if __name__ == "__main__":
    asyncio.run(main())

#!/usr/bin/env python3
"""Demonstration of the headless client.

This script shows how to:
1. Build a cursor paginated query
2. Page through the results with a PagingCursor
3. Map the items to a pydantic model

Set AEM_ENDPOINT (and AEM_TOKEN for author instances) before running, e.g.
AEM_ENDPOINT=http://localhost:4503
"""

import os

from pydantic import BaseModel, Field

from aem_headless.core import (
    GraphQlQuery,
    HeadlessClient,
    Operator,
    filter_value,
    ignore_case,
    sub_selection,
)


class Adventure(BaseModel):
    path: str = Field(alias="_path")
    title: str
    price: float | None = None


def main():
    endpoint = os.environ.get("AEM_ENDPOINT")
    if not endpoint:
        print("Please set AEM_ENDPOINT to the URL of a publish or author instance.")
        return

    print("=== Headless Client Demo ===\n")

    print("1. Building query...")
    query = (
        GraphQlQuery.builder()
        .content_fragment_model_name("adventure")
        .field("_path")
        .field("title", filter_value(Operator.CONTAINS, "surf", ignore_case()))
        .field("price")
        .field(sub_selection("primaryImage").field("_path"))
        .paginated()
        .sort_by("title ASC")
        .build()
    )
    print(query.generate_query())

    builder = HeadlessClient.builder().endpoint(endpoint)
    if os.environ.get("AEM_TOKEN"):
        builder.token_auth(os.environ["AEM_TOKEN"])

    print("2. Paging through results...")
    with builder.build() as client:
        cursor = client.create_paging_cursor(query, page_size=5)
        for page_number, page in enumerate(cursor, start=1):
            print(f"\n   Page {page_number}:")
            for adventure in page.get_items(Adventure):
                print(f"   - {adventure.title} ({adventure.path})")

    print("\n=== Demo Complete ===")


if __name__ == "__main__":
    main()

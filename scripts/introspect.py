#!/usr/bin/env python3
"""Fetch the GraphQL schema via introspection and save it as timestamped JSON.

Writes schema-<timestamp>.json (raw) and schema-<timestamp>.compressed.json
to graphql.introspection_output_dir. Point graphql.schema_path at the raw file
to use it as the default schema for /query.
"""

import asyncio
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


async def main() -> int:
    from sageql.domain.errors import ExecutionError
    from sageql.domain.services.schema_compression import compress_schema
    from sageql.infrastructure.config import load_config
    from sageql.infrastructure.graphql.client import GraphQLClient

    config = load_config()
    client = GraphQLClient(config.graphql)
    print(f"Fetching GraphQL schema from {config.graphql.api_url} ...")
    try:
        schema = await client.introspect()
    except ExecutionError as e:
        print(f"Error fetching schema: {e}", file=sys.stderr)
        return 1
    finally:
        await client.close()

    root = schema["__schema"]
    types = [t for t in root.get("types") or [] if not t.get("name", "").startswith("__")]
    print(f"Query type: {(root.get('queryType') or {}).get('name')}")
    print(f"Mutation type: {(root.get('mutationType') or {}).get('name')}")
    print(f"Subscription type: {(root.get('subscriptionType') or {}).get('name')}")
    print(f"Types: {len(types)}, directives: {len(root.get('directives') or [])}")

    out_dir = Path(config.graphql.introspection_output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
    raw_path = out_dir / f"schema-{stamp}.json"
    compressed_path = out_dir / f"schema-{stamp}.compressed.json"
    raw_path.write_text(json.dumps(schema, indent=2), encoding="utf-8")
    compressed_path.write_text(json.dumps(compress_schema(schema), indent=2), encoding="utf-8")
    print(f"Schema saved to {raw_path}")
    print(f"Compressed schema saved to {compressed_path}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

import argparse
import asyncio
import json
import sys
from blueprint.errors import BlueprintError
from blueprint.workflows.pipeline import pipeline
from blueprint.services.logger import logger

def main():
    parser = argparse.ArgumentParser(description="Generate a persona blueprint for an X handle")
    parser.add_argument("handle", help="Account handle, with or without @")
    parser.add_argument("--client-key", default="cli", help="Rate-limit key for this run")
    args = parser.parse_args()

    try:
        response = asyncio.run(pipeline.run(args.handle, args.client_key))
    except KeyboardInterrupt:
        logger.info("Stopped by user")
        sys.exit(130)
    except BlueprintError as e:
        print(json.dumps(e.to_dict()))
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)

    print(json.dumps(response.model_dump(by_alias=True), indent=2, ensure_ascii=False))

if __name__ == "__main__":
    main()

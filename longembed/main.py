"""longembed - command line entry point.

Embeds a text or a text file with a pretrained encoder and writes the
vector as JSON.

Usage:
    uv run longembed sentence-transformers/all-MiniLM-L6-v2 --text "Some text"
    uv run longembed sentence-transformers/all-MiniLM-L6-v2 --file doc.txt --output doc.json
    uv run longembed --config config/config.yaml --file doc.txt --details
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from longembed.config import Config, ModelSourceConfig, PipelineConfig
from longembed.errors import LongEmbedError
from longembed.model import EmbeddingModel


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Embed text of any length into a single vector.")
    parser.add_argument("model_id", nargs="?", help="Hub model id or local model directory (overrides --config)")
    parser.add_argument("--revision", default=None, help="Model revision (default: main)")
    parser.add_argument("--use-pth", action="store_true", help="Load pytorch_model.bin instead of model.safetensors")
    parser.add_argument("--config", type=Path, default=None, help="Path to a config.yaml")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--text", default=None, help="Text to embed")
    source.add_argument("--file", type=Path, default=None, help="UTF-8 text file to embed")
    parser.add_argument("--output", type=Path, default=None, help="Write JSON here instead of stdout")
    parser.add_argument("--details", action="store_true", help="Include per-window vectors and spans")
    parser.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def resolve_settings(args: argparse.Namespace) -> tuple[ModelSourceConfig, PipelineConfig, str]:
    """Combine config file and command line flags.

    Command line flags win over the config file.

    Returns:
        Tuple of (model_source, pipeline_config, log_level).

    Raises:
        ValueError: If neither a model id nor a config file is given.
    """
    if args.config is not None:
        config = Config(args.config)
        source = config.get_model_config()
        pipeline = config.get_pipeline_config()
        log_level = config.get_logging_config().level
    elif args.model_id:
        source = ModelSourceConfig(model_id=args.model_id)
        pipeline = PipelineConfig()
        log_level = "INFO"
    else:
        raise ValueError("Either MODEL_ID or --config is required")

    overrides: dict[str, Any] = {}
    if args.model_id:
        overrides["model_id"] = args.model_id
    if args.revision:
        overrides["revision"] = args.revision
    if args.use_pth:
        overrides["use_pth"] = True
    if overrides:
        source = source.model_copy(update=overrides)

    return source, pipeline, args.log_level or log_level


def read_input(args: argparse.Namespace) -> str:
    """Read the text to embed from --text, --file or stdin."""
    if args.text is not None:
        return str(args.text)
    if args.file is not None:
        if not args.file.exists():
            raise FileNotFoundError(f"File not found: {args.file}")
        return args.file.read_text(encoding="utf-8")
    return sys.stdin.read()


def build_output(model: EmbeddingModel, text: str, details: bool) -> dict[str, Any]:
    """Embed text and build the JSON document."""
    result = model.embed(text)
    output: dict[str, Any] = {
        "model_id": model.model_id,
        "max_input_len": model.get_max_input_len(),
        "hidden_size": model.get_hidden_size(),
        "num_tokens": result.num_tokens,
        "num_chunks": result.num_chunks,
        "embedding": result.vector.tolist(),
    }
    if details:
        output["chunks"] = [
            {"start": chunk.start, "end": chunk.end, "embedding": vector.tolist()}
            for chunk, vector in zip(result.chunks, result.chunk_vectors, strict=True)
        ]
    return output


def main(argv: list[str] | None = None) -> int:
    """Run the command line tool.

    Returns:
        Process exit code: 0 on success, 1 on error.
    """
    args = parse_args(argv)

    try:
        source, pipeline, log_level = resolve_settings(args)
    except (FileNotFoundError, KeyError, ValueError, yaml.YAMLError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(level=log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        text = read_input(args)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        model = EmbeddingModel.from_source(source, pipeline)
        output = build_output(model, text, args.details)
    except LongEmbedError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    document = json.dumps(output, indent=2)
    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(document + "\n", encoding="utf-8")
        print(f"Saved {output['num_chunks']} window(s), {output['hidden_size']} dims to: {args.output}")
    else:
        print(document)

    return 0


if __name__ == "__main__":
    sys.exit(main())

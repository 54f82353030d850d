"""CLI interface for the troubleshooting assistant.

Provides command-line access to assistant operations:
- search: Rank knowledge-base chunks for a query
- ask: Answer a question from the knowledge base
- ingest: Chunk, embed, and store text files
- stats: Summarize the processed corpus
- demo: Run a complete demo with sample maintenance notes
- serve: Start the FastAPI server
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from typing import Any, NoReturn, Optional

from src.assistant.config import AssistantConfig, RunMode
from src.assistant.document import Document, RankedChunk
from src.assistant.embeddings import create_embedding_provider
from src.assistant.logger import setup_logging
from src.assistant.pipeline import TroubleshootingAssistant
from src.ingestion.chunker import CharacterChunker
from src.ingestion.processor import DocumentProcessor, ingest_files
from src.retrieval.corpus import InMemoryCorpusStore, LocalCorpusStore


SAMPLE_DOCUMENTS = [
    Document(
        content=(
            "Hydraulic pressure drop after start-up is usually caused by a clogged "
            "hydraulic filter or a low hydraulic oil level. Stop the machine, "
            "release residual pressure, and check the oil level gauge. If the level "
            "is normal, replace the hydraulic filter element and bleed air from the "
            "circuit. Replace the hydraulic filter every 500 operating hours."
        ),
        source="hydraulic-unit-manual.txt",
        metadata={"machine": "press-200", "category": "hydraulics"},
    ),
    Document(
        content=(
            "Engine overheating alarms are triggered when coolant temperature exceeds "
            "105 degrees. Check the radiator fins for dust, the fan belt tension, and "
            "the coolant level in the reserve tank. Never open the radiator cap while "
            "the engine is hot. A stuck thermostat also causes overheating."
        ),
        source="engine-cooling-manual.txt",
        metadata={"machine": "generator-50", "category": "engine"},
    ),
    Document(
        content=(
            "If the conveyor belt slips or wanders, inspect belt tension and tracking. "
            "Adjust the take-up screws evenly on both sides. Worn drive pulley lagging "
            "reduces grip and must be replaced. Clean spilled material from the return "
            "side before restarting the conveyor."
        ),
        source="conveyor-maintenance.txt",
        metadata={"machine": "conveyor-3", "category": "mechanical"},
    ),
    Document(
        content=(
            "Emergency stop procedure: press the red emergency stop button, isolate the "
            "main power breaker, and apply lockout tags. Report the incident to the "
            "shift supervisor before any restart. The emergency stop circuit must be "
            "tested at the start of every shift."
        ),
        source="emergency-procedures.txt",
        metadata={"category": "safety"},
    ),
]


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Troubleshooting Assistant - knowledge-base retrieval for equipment faults"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    demo_parser = subparsers.add_parser("demo", help="Run a complete demo")
    demo_parser.add_argument(
        "--query",
        default="hydraulic pressure drops after start-up",
        help="Question to demo",
    )

    search_parser = subparsers.add_parser("search", help="Rank chunks for a query")
    search_parser.add_argument("query", help="Search query")
    search_parser.add_argument("--top-k", type=int, default=None, help="Number of chunks")
    search_parser.add_argument(
        "--threshold", type=float, default=None, help="Minimum cosine similarity"
    )

    ask_parser = subparsers.add_parser("ask", help="Answer a question")
    ask_parser.add_argument("question", help="Question to ask")
    ask_parser.add_argument("--top-k", type=int, default=None, help="Number of chunks")
    ask_parser.add_argument(
        "--threshold", type=float, default=None, help="Minimum cosine similarity"
    )
    ask_parser.add_argument("--language", choices=["ja", "en"], default=None)

    ingest_parser = subparsers.add_parser("ingest", help="Ingest text files")
    ingest_parser.add_argument("files", nargs="+", help="Files to ingest")

    subparsers.add_parser("stats", help="Show corpus statistics")

    serve_parser = subparsers.add_parser("serve", help="Start API server")
    serve_parser.add_argument("--host", default=None, help="Host")
    serve_parser.add_argument("--port", type=int, default=None, help="Port")

    args = parser.parse_args(argv)
    config = AssistantConfig()
    setup_logging(config.log_level, config.log_json)

    if args.command == "demo":
        run_demo(args.query)
    elif args.command == "search":
        run_search(config, args.query, args.top_k, args.threshold)
    elif args.command == "ask":
        run_ask(config, args.question, args.top_k, args.threshold, args.language)
    elif args.command == "ingest":
        run_ingest(config, args.files)
    elif args.command == "stats":
        run_stats(config)
    elif args.command == "serve":
        run_serve(args.host or config.api_host, args.port or config.api_port)
    else:
        parser.print_help()
        sys.exit(1)


def _fail(error: str) -> NoReturn:
    print(f"ERROR: {error}")
    sys.exit(1)


def _chunk_json(rc: RankedChunk) -> dict[str, Any]:
    return {
        "source": rc.source,
        "similarity": rc.similarity,
        "method": rc.method.value,
        "text": rc.text,
    }


def build_demo_assistant() -> TroubleshootingAssistant:
    """Mock-mode assistant over an in-memory corpus of the sample documents."""
    config = AssistantConfig(mode=RunMode.MOCK, chunk_size=300, chunk_overlap=50)
    embeddings = create_embedding_provider(config)
    processor = DocumentProcessor(
        embeddings, CharacterChunker(config.chunk_size, config.chunk_overlap)
    )
    store = InMemoryCorpusStore([processor.process(doc) for doc in SAMPLE_DOCUMENTS])
    return TroubleshootingAssistant(config, embedding_provider=embeddings, store=store)


def run_demo(query: str) -> None:
    """Run a complete demo with sample data."""
    print("=" * 60)
    print("Troubleshooting Assistant - Demo Mode")
    print("=" * 60)
    print()

    print(f"[1/3] Ingesting {len(SAMPLE_DOCUMENTS)} sample documents...")
    assistant = build_demo_assistant()
    stats = assistant.stats().unwrap()
    print(f"      Indexed {stats.total_chunks} chunks")
    print()

    print(f'[2/3] Asking: "{query}"')
    print()

    result = assistant.ask(query, similarity_threshold=0.1, language="en")
    if result.is_err():
        _fail(result.error)  # type: ignore[union-attr]

    output = result.unwrap()

    print("[3/3] Results:")
    print("-" * 60)
    print(f"Answer: {output.answer}")
    print()
    print(f"Model: {output.model}")
    print(f"Latency: {output.latency_ms:.1f}ms")
    print(f"Embedding used: {output.embedding_used}")
    print(f"Sources: {len(output.chunks)} chunks retrieved")
    print()
    for i, rc in enumerate(output.chunks, 1):
        print(f"  [{i}] {rc.source} (similarity: {rc.similarity:.3f}, method: {rc.method.value})")
        print(f"      {rc.text[:100]}...")
        print()
    print("=" * 60)

    print("JSON output:")
    print(
        json.dumps(
            {
                "answer": output.answer,
                "question": output.question,
                "model": output.model,
                "latency_ms": output.latency_ms,
                "sources": output.sources,
            },
            indent=2,
            ensure_ascii=False,
        )
    )


def run_search(
    config: AssistantConfig,
    query: str,
    top_k: Optional[int],
    threshold: Optional[float],
) -> None:
    """Rank chunks from the configured corpus."""
    assistant = TroubleshootingAssistant(config)
    try:
        result = assistant.search(query, top_k=top_k, similarity_threshold=threshold)
    except ValueError as e:
        _fail(str(e))
    if result.is_err():
        _fail(result.error)  # type: ignore[union-attr]

    outcome = result.unwrap()
    print(
        json.dumps(
            {
                "query": query,
                "embedding_used": outcome.embedding_used,
                "count": len(outcome.chunks),
                "chunks": [_chunk_json(rc) for rc in outcome.chunks],
            },
            indent=2,
            ensure_ascii=False,
        )
    )


def run_ask(
    config: AssistantConfig,
    question: str,
    top_k: Optional[int],
    threshold: Optional[float],
    language: Optional[str],
) -> None:
    """Answer a question from the configured corpus."""
    assistant = TroubleshootingAssistant(config)
    try:
        result = assistant.ask(
            question, top_k=top_k, similarity_threshold=threshold, language=language
        )
    except ValueError as e:
        _fail(str(e))
    if result.is_err():
        _fail(result.error)  # type: ignore[union-attr]

    output = result.unwrap()
    print(
        json.dumps(
            {
                "answer": output.answer,
                "question": output.question,
                "sources": output.sources,
                "model": output.model,
                "embedding_used": output.embedding_used,
                "top_similarity": output.top_similarity,
                "latency_ms": output.latency_ms,
            },
            indent=2,
            ensure_ascii=False,
        )
    )


def run_ingest(config: AssistantConfig, files: list[str]) -> None:
    """Chunk, embed, and store text files in the processed directory."""
    processor = DocumentProcessor(
        create_embedding_provider(config),
        CharacterChunker(config.chunk_size, config.chunk_overlap),
    )
    store = LocalCorpusStore(config.processed_dir)
    result = ingest_files(files, processor, store)
    if result.is_err():
        _fail(result.error)  # type: ignore[union-attr]

    written = result.unwrap()
    if written == 0:
        _fail("No valid documents to ingest")
    print(f"Indexed {written} chunks into {store.directory}")


def run_stats(config: AssistantConfig) -> None:
    """Print corpus statistics."""
    assistant = TroubleshootingAssistant(config)
    result = assistant.stats()
    if result.is_err():
        _fail(result.error)  # type: ignore[union-attr]
    print(json.dumps(asdict(result.unwrap()), indent=2, ensure_ascii=False))


def run_serve(host: str, port: int) -> None:
    """Start the FastAPI server."""
    import uvicorn

    uvicorn.run("src.api.app:app", host=host, port=port)


if __name__ == "__main__":
    main()

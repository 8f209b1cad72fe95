#!/usr/bin/env python3
"""agentOrchestrator - Main entry point.

Usage:
    python orchestrator_main.py

Type a complex task; the orchestrator plans it, fans out research and
execution workers, and prints progress notifications as they arrive.
Questions asked by the agents (ask_user) are answered on stdin.
"""

import asyncio
import json
import sys
import uuid
from pathlib import Path

# Add project root to sys.path for imports
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from agentOrchestrator.config.settings import get_settings
from agentOrchestrator.events import EventType, OrchestrationEvent
from agentOrchestrator.runtime import Credentials, build_orchestrator
from agentOrchestrator.utils.logging_utils import setup_logging


def format_event(event: OrchestrationEvent) -> str:
    """One-line rendering of a notification for the terminal."""
    payload = event.payload
    if event.type in (EventType.SESSION_CREATED, EventType.SESSION_UPDATED,
                      EventType.SESSION_COMPLETE, EventType.SESSION_ERROR):
        session = payload.get("session", {})
        error = f" ({session['error']})" if session.get("error") else ""
        return f"[session] {session.get('status')}{error}"
    if event.type in (EventType.TASK_CREATED, EventType.TASK_UPDATED):
        task = payload.get("task", {})
        return f"[task] {task.get('status'):<11} {task.get('title')}"
    if event.type == EventType.EXPLORE_STARTED:
        return f"[explore] launching {payload.get('count')} worker(s)"
    if event.type == EventType.SUB_AGENT_DONE:
        return f"[explore] worker {payload.get('index')} done: {str(payload.get('summary', ''))[:80]}"
    if event.type == EventType.EXECUTE_STARTED:
        return f"[execute] launching {payload.get('count')} worker(s)"
    if event.type == EventType.SUB_EXECUTOR_DONE:
        status = "ok" if payload.get("success") else "failed"
        return f"[execute] worker {payload.get('index')} {status}: {str(payload.get('summary', ''))[:80]}"
    if event.type == EventType.TOOL_CALL:
        return f"[tool] {payload.get('toolCall', {}).get('toolName')}"
    return ""


async def print_events(subscription) -> None:
    async for event in subscription:
        line = format_event(event)
        if line:
            print(line)


async def ask_on_stdin(request: dict):
    """Answer an ask_user question from the terminal."""
    print()
    print(f"? {request.get('question', '')}")
    for option in request.get("options") or []:
        print(f"   - {option.get('value')}: {option.get('label')}")
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, lambda: input("> ").strip())


async def main():
    """Main entry point for the orchestrator CLI."""
    settings = get_settings()
    setup_logging(settings.observability)

    print("=" * 60)
    print("agentOrchestrator - plan, explore and execute complex tasks")
    print("=" * 60)
    print()
    print("Commands:")
    print("  /quit, /exit  - exit")
    print("  /status       - show the current session snapshot")
    print()

    orchestrator = build_orchestrator(settings, user_input=ask_on_stdin, log_events=False)
    credentials = Credentials(api_key=settings.models.api_key, base_url=settings.models.base_url)
    thread_id = str(uuid.uuid4())

    print(f"Model: {settings.models.model_id}")
    print(f"Tools: {sorted(t.name for t in orchestrator.tool_registry.list_tools())}")
    print()

    while True:
        try:
            user_input = input("task> ").strip()

            if not user_input:
                continue

            if user_input in ["/quit", "/exit"]:
                print("\nBye!")
                break

            if user_input == "/status":
                snapshot = orchestrator.get_session_snapshot(thread_id)
                print(json.dumps(snapshot, indent=2, ensure_ascii=False) if snapshot else "No session yet")
                continue

            subscription = orchestrator.subscribe(thread_id)
            printer = asyncio.create_task(print_events(subscription))
            try:
                result = await orchestrator.start_orchestration(thread_id, user_input, credentials)
            finally:
                printer.cancel()
                for event in subscription.drain():
                    line = format_event(event)
                    if line:
                        print(line)
                subscription.close()

            print()
            print("✓ Success" if result.success else "✗ Failed")
            print(result.summary)
            if result.error:
                print(f"Error: {result.error}")
            for task in result.tasks_summary:
                print(f"  - [{task['status']}] {task['title']}")
            print()

        except KeyboardInterrupt:
            print("\n\nUse /quit to exit")
            continue
        except Exception as e:
            print(f"\nError: {e}")
            continue


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n\nBye!")
        sys.exit(0)

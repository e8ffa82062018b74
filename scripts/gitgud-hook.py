#!/usr/bin/env python3
"""
UserPromptSubmit Hook: GitGud

Every N requests, assigns a hands-on coding exercise related to the user's
request and keeps Claude from writing the code until the user completes
or skips it.
"""

import json
import os
import sys
from datetime import datetime
from pathlib import Path

from gitgud_tools.state.store import FileStateStore
from gitgud_tools.tasks.engine import Action, ActionType, TaskEngine

DEBUG_LOG = Path("/tmp/claude/gitgud-hook-debug.log")


def debug_log(msg: str) -> None:
    """Write debug message to log file with timestamp (only when GITGUD_DEBUG is set)."""
    if not os.environ.get("GITGUD_DEBUG"):
        return
    try:
        DEBUG_LOG.parent.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        with DEBUG_LOG.open("a", encoding="utf-8") as f:
            f.write(f"[{timestamp}] {msg}\n")
    except OSError:
        pass  # Debug logging must never break the hook


def format_context(action: Action) -> str:
    """Turn an engine action into context for Claude. Empty string for `continue`."""
    data = action.data

    if action.type == ActionType.SKIP_USED:
        return (
            "GITGUD: SKIP USED\n\n"
            "The user chose to skip the manual task.\n"
            f"Skips remaining today: {data['remainingSkips']}/{data['maxSkips']}\n\n"
            "Proceed normally with the user's request.\n"
            "Tell the user they used a skip and how many are left."
        )

    if action.type == ActionType.SKIP_DENIED:
        return (
            "GITGUD: NO SKIPS LEFT\n\n"
            f"The user has used all {data['maxSkips']} skips for today.\n"
            "The pending task stays active. Do NOT write code for the user.\n"
            "Remind them to finish the task and run /gg-complete."
        )

    if action.type == ActionType.PENDING_TASK:
        return (
            "GITGUD ACTIVE\n\n"
            f"PENDING TASK:\n{data['task']}\n\n"
            "MANDATORY INSTRUCTIONS FOR CLAUDE:\n"
            "1. DON'T write code\n"
            "2. DON'T provide complete implementations\n"
            "3. DON'T give copy-paste snippets\n"
            "4. You may ONLY answer conceptual questions, point to documentation,\n"
            "   confirm whether an approach is right (without code) and give high-level hints\n\n"
            f"Skips available: {data['remainingSkips']}/{data['maxSkips']} (say 'skip' to skip)\n"
            "When done: /gg-complete\n\n"
            "Remind the user of the task and their options."
        )

    if action.type == ActionType.NEW_TASK:
        return (
            "GITGUD - NEW CHALLENGE!\n\n"
            f"Request #{data['requestNumber']} - Time to git gud!\n"
            f"Current streak: {data['currentStreak']} days\n\n"
            f"YOUR TASK:\n{data['task']}\n\n"
            "INSTRUCTIONS FOR CLAUDE:\n"
            "1. DON'T write code - the user must do it\n"
            "2. Present the task clearly and motivationally\n"
            "3. Explain WHY this exercise is useful for the original request\n"
            "4. Suggest documentation/resources\n"
            "5. Give high-level hints if requested\n\n"
            f"Skips available: {data['remainingSkips']}/{data['maxSkips']} (user can say 'skip')\n"
            "When done: /gg-complete\n\n"
            "Present the challenge to the user!"
        )

    return ""


def main() -> None:
    """Process the submitted prompt and inject GitGud context when needed."""
    try:
        hook_input = json.loads(sys.stdin.read())
    except Exception as e:
        debug_log(f"Failed to read hook input: {e}")
        sys.exit(0)

    try:
        prompt = hook_input.get("prompt", "") if isinstance(hook_input, dict) else ""
        action = TaskEngine(FileStateStore()).process_prompt(prompt)
        debug_log(f"action={action.type.value} data={action.data}")

        context = format_context(action)
        if context:
            output = {"hookSpecificOutput": {"hookEventName": "UserPromptSubmit", "additionalContext": context}}
            print(json.dumps(output, indent=2))
        sys.exit(0)

    except Exception as e:
        # On error, still exit successfully to not block user prompts
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    main()

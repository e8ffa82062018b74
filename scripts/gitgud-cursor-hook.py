#!/usr/bin/env python3
"""beforeSubmitPrompt hook (Cursor) - GitGud.

Cursor only accepts {"continue": bool} from this hook, so the action is
recorded in the `last_action` state file for an editor rule to pick up.
The prompt is always allowed through.
"""

import json
import sys

from gitgud_tools.state.store import FileStateStore, StateKey
from gitgud_tools.tasks.engine import Action, ActionType, TaskEngine


def last_action_message(action: Action) -> str | None:
    """One-line summary for the rule file. None means clear it."""
    data = action.data
    if action.type == ActionType.SKIP_USED:
        return f"Skip used! Remaining skips today: {data['remainingSkips']}/{data['maxSkips']}"
    if action.type == ActionType.SKIP_DENIED:
        return f"No skips remaining! All {data['maxSkips']} skips used today."
    if action.type == ActionType.NEW_TASK:
        return f"New task assigned! Request #{data['requestNumber']}. Streak: {data['currentStreak']} days"
    if action.type == ActionType.PENDING_TASK:
        # The rule reads the pending task directly; keep whatever was there
        return ""
    return None


def main() -> None:
    try:
        input_data = json.loads(sys.stdin.read())
        prompt = input_data.get("prompt", "") if isinstance(input_data, dict) else ""

        store = FileStateStore()
        action = TaskEngine(store).process_prompt(prompt)

        message = last_action_message(action)
        if message is None:
            store.delete(StateKey.LAST_ACTION)
        elif message:
            store.write(StateKey.LAST_ACTION, message)

    except Exception as e:
        # Fail open on errors
        print(f"gitgud: {e}", file=sys.stderr)

    print(json.dumps({"continue": True}))
    sys.exit(0)


if __name__ == "__main__":
    main()

"""Interactive confirmation prompts.

Every procedure is human-paced: the operator confirms each destructive
step. The helpers here wrap ``questionary.confirm`` with a shared style and
translate refusals into the exceptions the CLI understands.
"""

import questionary
from questionary import Style

from kubeseal_keyring.exceptions import OperationCancelled, PreconditionError

PROMPT_STYLE = Style(
    [
        ("qmark", "fg:#ff5f5f bold"),  # Red question mark, these prompts guard key material
        ("question", "bold"),
        ("answer", "fg:#ffaf5f bold"),  # Orange submitted answer
        ("instruction", "fg:#6c6c6c italic"),
        ("text", ""),
    ]
)

QMARK = "? "


def confirm(message: str, *, default: bool) -> bool:
    """Ask a yes/no question.

    Args:
        message: The question to display.
        default: Answer used when the operator just presses Enter.

    Returns:
        True if the operator answered yes.

    """
    return bool(
        questionary.confirm(
            message,
            default=default,
            style=PROMPT_STYLE,
            qmark=QMARK,
        ).unsafe_ask()
    )


def require_confirmation(message: str) -> None:
    """Ask to proceed, defaulting to No.

    Args:
        message: The question to display.

    Raises:
        OperationCancelled: If the operator declines.

    """
    if not confirm(message, default=False):
        raise OperationCancelled()


def require_precondition(message: str, failure: str) -> None:
    """Ask the operator to attest a precondition, defaulting to No.

    Unlike a plain cancellation, refusing a precondition is an error.

    Args:
        message: The question to display.
        failure: Error message used when the operator answers no.

    Raises:
        PreconditionError: If the operator declines.

    """
    if not confirm(message, default=False):
        raise PreconditionError(failure)


def resolve_choice(flag: bool | None, message: str, *, default: bool) -> bool:
    """Use an explicit CLI flag when given, otherwise ask.

    Args:
        flag: Value of a ``--x/--no-x`` option, None when not passed.
        message: Question to ask when the flag is absent.
        default: Default answer for the question.

    Returns:
        The resolved choice.

    """
    if flag is not None:
        return flag
    return confirm(message, default=default)

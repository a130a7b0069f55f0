"""Interactive CLI simulator — drive the passwordless login flow from a terminal."""

import asyncio
import logging

from passwordless_auth.config import settings
from passwordless_auth.models.auth_state import AuthScreen, AuthState
from passwordless_auth.services.auth_state_machine import AuthStateMachine

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
BOLD = "\033[1m"
RESET = "\033[0m"

HELP = f"""{DIM}Commands:
  email <address>   set the email on the login screen
  send              generate an OTP for the email
  otp <digits>      type the code on the OTP screen
  verify            validate the typed code
  resend            issue a fresh code
  back              return to the login screen
  logout            end the session
  clear             clear error messages
  state             show the current screen
  quit              exit{RESET}
"""


def render(state: AuthState) -> str:
    """Render a snapshot the way a screen would show it."""
    lines = [f"{BOLD}[{state.screen.value}]{RESET}"]
    if state.screen is AuthScreen.LOGIN:
        validity = "valid" if state.is_email_valid else "invalid"
        lines.append(f"  email: {state.email or '-'} ({validity})")
        if state.error_message:
            lines.append(f"  {RED}{state.error_message}{RESET}")
    elif state.screen is AuthScreen.OTP_PENDING:
        lines.append(f"  code sent to {state.email}: {YELLOW}{state.generated_otp}{RESET}")
        lines.append(f"  input: {state.otp_input or '-'}")
        lines.append(
            f"  {state.otp_seconds_remaining}s left, "
            f"{state.otp_attempts_remaining} attempt(s) remaining"
        )
        if state.is_otp_expired:
            lines.append(f"  {RED}expired{RESET}")
        if state.otp_error:
            lines.append(f"  {RED}{state.otp_error}{RESET}")
    else:
        lines.append(f"  signed in as {state.email}")
        lines.append(f"  session started {state.session_started_at:%H:%M:%S}")
        lines.append(f"  duration {state.session_duration_seconds}s")
    return "\n".join(lines)


async def main() -> None:
    print(f"\n{BOLD}{'=' * 52}")
    print(f"  🔐  {settings.app_name} — Simulator")
    print(f"{'=' * 52}{RESET}\n")
    print(HELP)

    machine = AuthStateMachine()

    while True:
        try:
            # Read in a worker thread so the timers keep ticking.
            line = (await asyncio.to_thread(input, f"{BLUE}{BOLD}>{RESET} ")).strip()
        except (KeyboardInterrupt, EOFError):
            print(f"\n{DIM}Goodbye!{RESET}")
            break

        if not line:
            continue

        command, _, argument = line.partition(" ")
        command = command.lower()

        if command == "quit":
            print(f"{DIM}Goodbye!{RESET}")
            break
        if command == "email":
            await machine.submit_email_change(argument.strip())
        elif command == "send":
            await machine.generate_otp()
        elif command == "otp":
            await machine.submit_otp_digits(argument)
        elif command == "verify":
            await machine.validate_otp()
        elif command == "resend":
            await machine.resend_otp()
        elif command == "back":
            await machine.navigate_back()
        elif command == "logout":
            duration = await machine.logout()
            print(f"{GREEN}👋 Logged out after {duration}s{RESET}")
        elif command == "clear":
            await machine.clear_error()
        elif command != "state":
            print(HELP)
            continue

        print(render(machine.state) + "\n")

    await machine.close()


if __name__ == "__main__":
    asyncio.run(main())

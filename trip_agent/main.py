"""Terminal chat loop for the trip planning agent."""
import asyncio
import sys

from dotenv import load_dotenv

# Load env before settings are read
load_dotenv()

from trip_agent.agent.factory import AgentFactory  # noqa: E402
from trip_agent.config import configure_logging, settings  # noqa: E402
from trip_agent.sessions import SessionRegistry  # noqa: E402


async def main():
    print("Initializing Trip Planner...")
    configure_logging(settings.log_level, settings.log_file, stream=False)

    agent = await AgentFactory.initialize(SessionRegistry(), settings)
    session_id = "cli-session"

    print("\n--- Trip Planner Ready (Type 'quit' to exit) ---\n")
    try:
        while True:
            user_input = input("You: ")
            if user_input.lower() in ["quit", "exit"]:
                break
            if not user_input.strip():
                continue

            response = await agent.handle_message(session_id, user_input)
            print(f"Agent: {response.message}")

            if response.pdf_bytes:
                file_name = f"itinerary_{session_id}.pdf"
                with open(file_name, "wb") as f:
                    f.write(response.pdf_bytes)
                print(f"[PDF saved to {file_name}]")
    finally:
        await AgentFactory.cleanup()
        print("Shutdown complete.")


if __name__ == "__main__":
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(main())

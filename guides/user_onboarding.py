"""Example: onboard a user with a profile and a subscription.

Run it directly, or through the CLI:

    sagaflow workflow run guides/user_onboarding.py:workflow --input '{"name": "John"}'
    sagaflow workflow run guides/user_onboarding.py:failing_workflow --input '{"name": "John"}'
"""

import asyncio
import logging

from sagaflow import BaseStep, WorkflowBuilder


class Services:
    """Stand-in for an application's dependency container."""

    def __init__(self):
        self.users = {}
        self.profiles = {}
        self.subscriptions = {}


class CreateUser(BaseStep):
    async def execute(self, input, context, resolver):
        user_id = f"user-{len(resolver.users) + 1}"
        resolver.users[user_id] = input["name"]
        return {"id": user_id}

    async def compensate(self, output, context, resolver):
        resolver.users.pop(output["id"], None)


class CreateProfile(BaseStep):
    async def execute(self, input, context, resolver):
        profile_id = f"profile-{input}"
        resolver.profiles[profile_id] = input
        return {"profile_id": profile_id}

    async def compensate(self, output, context, resolver):
        resolver.profiles.pop(output["profile_id"], None)


class CreateSubscription(BaseStep):
    async def execute(self, input, context, resolver):
        sub_id = f"sub-{input}"
        resolver.subscriptions[sub_id] = input
        return {"sub_id": sub_id}

    async def compensate(self, output, context, resolver):
        resolver.subscriptions.pop(output["sub_id"], None)


class SendWelcomeEmail(BaseStep):
    async def execute(self, input, context, resolver):
        raise RuntimeError("mail server unavailable")


services = Services()


def _user_id(context):
    return context["user"]["id"]


def _onboarding():
    return (
        WorkflowBuilder(services, name="user_onboarding")
        .add_step("user", CreateUser())
        .add_parallel(
            {"profile": CreateProfile(), "subscription": CreateSubscription()},
            {"profile": _user_id, "subscription": _user_id},
        )
    )


workflow = _onboarding().build()
failing_workflow = _onboarding().add_step("welcome", SendWelcomeEmail()).build()


async def main():
    result = await workflow.execute({"name": "John"})
    print("User created with profile and subscription:", result)

    try:
        await failing_workflow.execute({"name": "Jane"})
    except RuntimeError as exc:
        print("Workflow failed:", exc)
    print("Users left after rollback:", services.users)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())

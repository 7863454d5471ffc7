"""Access control evaluator, profile gateway and authorizer unit tests."""

from __future__ import annotations

from itertools import product
import unittest

from formdesk.domain.access_control import Action, Allow, Deny, DenyReason, Scope, evaluate
from formdesk.errors import ApiError
from formdesk.repositories.memory import InMemoryStore, StoreUnavailableError
from formdesk.schemas.auth import AuthPrincipal
from formdesk.schemas.profile import Role
from formdesk.services.authorization import Authorizer
from formdesk.services.profile_gateway import ProfileGateway, ProfileNotFoundError

_PROTECTED_ACTIONS = [action for action in Action if action is not Action.READ_OWN_PROFILE]
_ADMIN_ONLY_ACTIONS = [Action.LIST_USERS, Action.CREATE_USER, Action.UPDATE_USER, Action.BAN_USER]


def _profile(store: InMemoryStore, user_id: str, *, role: Role = Role.BASIC, is_banned: bool = False):
    return store.create_profile(user_id=user_id, email=f"{user_id}@example.com", role=role, is_banned=is_banned)


class EvaluatorRuleTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemoryStore()

    def test_banned_profiles_are_denied_every_protected_action_regardless_of_role(self) -> None:
        for index, (role, action) in enumerate(product(Role, _PROTECTED_ACTIONS)):
            with self.subTest(role=role, action=action):
                profile = _profile(self.store, f"banned-{index}", role=role, is_banned=True)
                decision = evaluate(profile, action, target_principal_id="someone-else")
                self.assertEqual(decision, Deny(DenyReason.BANNED))

    def test_banned_profile_may_still_read_own_profile(self) -> None:
        profile = _profile(self.store, "banned-user", is_banned=True)

        self.assertEqual(evaluate(profile, Action.READ_OWN_PROFILE), Allow())

    def test_banned_admin_is_denied_before_role_is_consulted(self) -> None:
        profile = _profile(self.store, "banned-admin", role=Role.ADMIN, is_banned=True)

        decision = evaluate(profile, Action.BAN_USER, target_principal_id="banned-admin")

        self.assertEqual(decision, Deny(DenyReason.BANNED))

    def test_basic_profiles_are_forbidden_admin_only_actions(self) -> None:
        profile = _profile(self.store, "basic-user")

        for action in _ADMIN_ONLY_ACTIONS:
            with self.subTest(action=action):
                self.assertEqual(
                    evaluate(profile, action, target_principal_id="other-user"),
                    Deny(DenyReason.FORBIDDEN),
                )

    def test_viewing_another_users_submission_requires_admin(self) -> None:
        basic = _profile(self.store, "basic-user")
        admin = _profile(self.store, "admin-user", role=Role.ADMIN)

        self.assertEqual(
            evaluate(basic, Action.VIEW_SUBMISSION, resource_owner_id="other-user"),
            Deny(DenyReason.FORBIDDEN),
        )
        self.assertEqual(evaluate(basic, Action.VIEW_SUBMISSION, resource_owner_id="basic-user"), Allow())
        self.assertEqual(evaluate(admin, Action.VIEW_SUBMISSION, resource_owner_id="other-user"), Allow())

    def test_admin_cannot_ban_self_but_may_change_own_role(self) -> None:
        admin = _profile(self.store, "admin-user", role=Role.ADMIN)

        self.assertEqual(
            evaluate(admin, Action.BAN_USER, target_principal_id="admin-user"),
            Deny(DenyReason.CANNOT_SELF_BAN),
        )
        self.assertEqual(evaluate(admin, Action.UPDATE_USER, target_principal_id="admin-user"), Allow())
        self.assertEqual(evaluate(admin, Action.BAN_USER, target_principal_id="basic-user"), Allow())

    def test_submission_listing_scope_depends_on_role(self) -> None:
        basic = _profile(self.store, "basic-user")
        admin = _profile(self.store, "admin-user", role=Role.ADMIN)

        self.assertEqual(
            evaluate(basic, Action.LIST_SUBMISSIONS),
            Allow(scope=Scope.OWN, owner_id="basic-user"),
        )
        self.assertEqual(evaluate(admin, Action.LIST_SUBMISSIONS), Allow(scope=Scope.ALL))

    def test_any_non_banned_user_may_create_submissions(self) -> None:
        for role in Role:
            with self.subTest(role=role):
                profile = _profile(self.store, f"creator-{role.value}", role=role)
                self.assertEqual(evaluate(profile, Action.CREATE_SUBMISSION), Allow(scope=Scope.UNRESTRICTED))


class ProfileGatewayTests(unittest.TestCase):
    def test_profile_is_read_once_per_gateway(self) -> None:
        store = InMemoryStore()
        _profile(store, "user-1")
        gateway = ProfileGateway(store)

        first = gateway.load_profile("user-1")
        second = gateway.load_profile("user-1")

        self.assertIs(first, second)
        self.assertEqual(store.profile_read_count, 1)

        ProfileGateway(store).load_profile("user-1")
        self.assertEqual(store.profile_read_count, 2)

    def test_missing_profile_and_store_failure_are_distinct(self) -> None:
        store = InMemoryStore()
        gateway = ProfileGateway(store)

        with self.assertRaises(ProfileNotFoundError):
            gateway.load_profile("ghost")

        store.profile_read_failure_message = "connection refused"
        with self.assertRaises(StoreUnavailableError):
            gateway.load_profile("ghost")


class AuthorizerTests(unittest.TestCase):
    def test_missing_profile_is_denied_as_forbidden(self) -> None:
        authorizer = Authorizer(ProfileGateway(InMemoryStore()))

        with self.assertRaises(ApiError) as context:
            authorizer.authorize(AuthPrincipal(user_id="ghost"), Action.READ_OWN_PROFILE)

        self.assertEqual(context.exception.status_code, 403)
        self.assertEqual(context.exception.payload.code, "PROFILE_NOT_FOUND")

    def test_deny_reasons_map_to_contract_errors(self) -> None:
        store = InMemoryStore()
        _profile(store, "banned-user", is_banned=True)
        _profile(store, "basic-user")
        _profile(store, "admin-user", role=Role.ADMIN)
        authorizer = Authorizer(ProfileGateway(store))

        cases = [
            ("banned-user", Action.LIST_SUBMISSIONS, None, 403, "USER_BANNED"),
            ("basic-user", Action.LIST_USERS, None, 403, "FORBIDDEN"),
            ("admin-user", Action.BAN_USER, "admin-user", 400, "CANNOT_SELF_BAN"),
        ]
        for user_id, action, target, status_code, code in cases:
            with self.subTest(user_id=user_id, action=action):
                with self.assertRaises(ApiError) as context:
                    authorizer.authorize(AuthPrincipal(user_id=user_id), action, target_principal_id=target)
                self.assertEqual(context.exception.status_code, status_code)
                self.assertEqual(context.exception.payload.code, code)

    def test_single_submission_read_of_another_owner_requires_admin(self) -> None:
        store = InMemoryStore()
        _profile(store, "basic-user")
        _profile(store, "admin-user", role=Role.ADMIN)
        authorizer = Authorizer(ProfileGateway(store))

        with self.assertRaises(ApiError) as context:
            authorizer.authorize(
                AuthPrincipal(user_id="basic-user"),
                Action.VIEW_SUBMISSION,
                resource_owner_id="admin-user",
            )
        self.assertEqual(context.exception.payload.code, "FORBIDDEN")

        allowed = authorizer.authorize(
            AuthPrincipal(user_id="admin-user"),
            Action.VIEW_SUBMISSION,
            resource_owner_id="basic-user",
        )
        self.assertEqual(allowed.decision, Allow())

    def test_recheck_reuses_loaded_profile(self) -> None:
        store = InMemoryStore()
        _profile(store, "admin-user", role=Role.ADMIN)
        authorizer = Authorizer(ProfileGateway(store))

        context = authorizer.authorize(AuthPrincipal(user_id="admin-user"), Action.UPDATE_USER)
        rechecked = authorizer.recheck(context, Action.BAN_USER, target_principal_id="basic-user")

        self.assertIs(rechecked.profile, context.profile)
        self.assertEqual(store.profile_read_count, 1)


if __name__ == "__main__":
    unittest.main()

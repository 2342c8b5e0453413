import pytest

from alchemist.errors import UsernameTaken


async def test_register_generates_id_and_trims(users):
    user = await users.register("  Ana  ")

    assert user.user_id
    assert user.username == "Ana"
    assert user.discovery_count == 0
    assert user.joined_at is not None
    assert await users.display_name(user.user_id) == "Ana"


async def test_register_blank_name(users):
    with pytest.raises(ValueError):
        await users.register("   ", user_id="u1")


async def test_name_taken_by_another_user(users):
    await users.register("Ana", user_id="u1")

    with pytest.raises(UsernameTaken):
        await users.register("Ana", user_id="u2")
    assert await users.get("u2") is None


async def test_check_is_case_sensitive(users):
    await users.register("Ana", user_id="u1")

    assert await users.is_username_taken("Ana") is True
    assert await users.is_username_taken("ana") is False
    user = await users.register("ana", user_id="u2")
    assert user.username == "ana"


async def test_user_may_keep_or_change_own_name(users, ledger):
    await users.register("Ana", user_id="u1")
    await ledger.increment_discovery_count("u1")

    assert await users.is_username_taken("Ana", exclude_user_id="u1") is False
    renamed = await users.register("Ana Maria", user_id="u1")

    assert renamed.username == "Ana Maria"
    assert renamed.discovery_count == 1


async def test_display_name_of_unknown_user(users):
    assert await users.display_name("ghost") is None
    assert await users.display_name("") is None

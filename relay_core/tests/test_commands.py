from relay_core.domain.commands import (
    Chat,
    Clear,
    Help,
    Prompt,
    Source,
    View,
    help_text,
    parse_command,
    select_chat_trigger,
)


def test_parse_basic_commands():
    assert parse_command("/help") == Help()
    assert parse_command("/view") == View()
    assert parse_command("/clear") == Clear()
    assert parse_command("/source") == Source()


def test_parse_commands_with_payload():
    assert parse_command("/prompt You are [name]'s pirate") == Prompt("You are [name]'s pirate")
    assert parse_command("/chat  hello there ") == Chat("hello there")
    assert parse_command("/chat") == Chat("")


def test_aliases_and_case_insensitivity():
    assert parse_command("/askgpt hi") == Chat("hi")
    assert parse_command("/RESET") == Clear()
    assert parse_command("/Chat Hi") == Chat("Hi")


def test_bot_mention_handling():
    assert parse_command("/view@AkenoBot", bot_username="akenobot") == View()
    assert parse_command("/view@OtherBot", bot_username="AkenoBot") is None
    assert parse_command("/chat@akenobot\nmulti line", bot_username="AkenoBot") == Chat("multi line")


def test_non_commands_and_unknown():
    assert parse_command("hello") is None
    assert parse_command("/unknown stuff") is None
    assert parse_command("/") is None
    assert parse_command("") is None


def test_help_text_lists_all_commands():
    text = help_text()
    assert text.startswith("These commands are supported:")
    for keyword in ("help", "prompt", "chat", "askgpt", "view", "clear", "reset", "source"):
        assert f"/{keyword} - " in text


def test_wake_word_trigger_is_case_insensitive():
    assert select_chat_trigger("Akeno, how are you?", "akeno", False) == Chat("Akeno, how are you?")
    assert select_chat_trigger("AKENO hi", "akeno", False) == Chat("AKENO hi")


def test_reply_to_bot_trigger():
    assert select_chat_trigger("and then?", "akeno", True) == Chat("and then?")


def test_no_trigger_means_ignored():
    assert select_chat_trigger("hello world", "akeno", False) is None
    assert select_chat_trigger("", "akeno", True) is None


def test_both_triggers_fire_once():
    assert select_chat_trigger("akeno again", "akeno", True) == Chat("akeno again")

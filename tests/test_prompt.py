from __future__ import annotations

from typing import Iterator

from hedera_contract_withdraw.prompt import confirm


def _answers(*values: str):
    iterator: Iterator[str] = iter(values)
    prompts: list[str] = []

    def fake_input(prompt: str) -> str:
        prompts.append(prompt)
        return next(iterator)

    return fake_input, prompts


def test_confirm_accepts_yes_after_invalid_answers() -> None:
    fake_input, prompts = _answers("maybe", "", "Y")
    assert confirm("Proceed?", input_fn=fake_input) is True
    assert prompts == ["Proceed? [y/n]: "] * 3


def test_confirm_declines_on_no() -> None:
    fake_input, _ = _answers("no")
    assert confirm("Proceed?", input_fn=fake_input) is False


def test_confirm_treats_end_of_input_as_decline() -> None:
    def closed_stdin(_prompt: str) -> str:
        raise EOFError

    assert confirm("Proceed?", input_fn=closed_stdin) is False

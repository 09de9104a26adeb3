from keypad.config import configure_logging
from keypad.engine import Engine
from keypad.keymap import KeymapError, type_keys


if __name__ == "__main__":
    configure_logging()
    engine = Engine()

    while True:
        try:
            keys = input("> ")
        except EOFError:
            break

        if keys.strip() == "quit":
            break

        try:
            type_keys(engine, keys)
        except KeymapError as e:
            print(e)
            continue

        if engine.expression_text:
            print(f"  {engine.expression_text} =")
        print(f"  {engine.display_text}    [{engine.clear_button_label}]")

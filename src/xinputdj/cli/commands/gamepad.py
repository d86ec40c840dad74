"""Gamepad command implementations."""

import click


@click.group(name="gamepad")
def gamepad_group():
    """Gamepad device commands."""
    pass


@gamepad_group.command(name="list")
def list_gamepads():
    """List gamepads pygame can see."""
    import pygame

    pygame.joystick.init()
    try:
        count = pygame.joystick.get_count()

        click.echo("Gamepads:\n")
        if count == 0:
            click.echo("  No gamepads found.")
            return

        for i in range(count):
            joystick = pygame.joystick.Joystick(i)
            click.echo(
                f"  [{i}] {joystick.get_name()} "
                f"({joystick.get_numaxes()} axes, {joystick.get_numbuttons()} buttons, "
                f"{joystick.get_numhats()} hats)"
            )
    finally:
        pygame.joystick.quit()

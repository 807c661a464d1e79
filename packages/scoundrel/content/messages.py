"""Player-facing strings shared by the engine and the text driver."""

# Hints, keyed by phase name in cli.py
HINT_MAIN = "Main menu: type 'start' to enter the dungeon."
HINT_ROOM_CHOICE_CAN_SKIP = "Room: 'f' to face, 's' to skip."
HINT_ROOM_CHOICE_NO_SKIP = "Room: 'f' to face (skip already used)."
HINT_CARD_SELECTION = "Select: type 1-4 to resolve a card."
HINT_PROMPT_WEAPON = "Prompt: type 'y' to use your weapon or 'n' to fight bare-handed."
HINT_INTERACTION_ACK = "Battle won. Press enter to continue."
HINT_GAME_OVER = "Game over: type 'restart' to play again, or 'quit'."

# State messages
ENTERED_DUNGEON = "Entered the dungeon."
FACE_ROOM = "Facing the room. Choose a card."
SKIPPED_ROOM = "Skipped the room."
ROOM_RESOLVED = "Room resolved. Face or skip the next room."
YOU_SURVIVED = "You survived the dungeon!"
YOU_DIED = "You succumbed to the dungeon's monsters."
SESSION_CLOSED = "Session closed."
POTION_WASTED = "Potion wasted (only 1 per room)."

# Rejection messages
NEED_START = "Start a game first."
NEED_FACE_OR_SKIP = "Face or skip the room first."
SKIP_LOCKED = "You cannot skip two rooms in a row. Face this room."
SKIP_PARTIAL_ROOM = "Only a fully dealt room can be skipped."
MUST_FACE_FIRST = "You must face the room before selecting a card."
INVALID_CARD_SELECTION = "Invalid card selection."
EMPTY_SLOT = "That slot is empty."
NEED_WEAPON_CHOICE = "Answer the weapon prompt first (yes or no)."
INVALID_WEAPON_ANSWER = "Answer the weapon prompt with yes or no."
NEED_CONTINUE = "Continue to proceed."
NO_PENDING_MONSTER = "No monster is waiting for a weapon decision."
NOTHING_TO_CONTINUE = "Nothing to acknowledge."
GAME_IS_OVER = "The game is over. Restart to play again."
NO_WEAPON = "No weapon equipped."
WEAPON_TOO_DULL = "Your weapon is too worn to fight a monster this strong."

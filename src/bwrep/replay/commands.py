from __future__ import annotations

from dataclasses import dataclass

from construct import ConstructError

from ..config import MAX_COMMANDS
from .opcodes import CLASSIC_PROFILE, FRAME_SKIP_U8, FRAME_SKIP_U16, FRAME_STEP, MAX_COMMAND_LENGTH, EngineProfile
from .types import Command, StreamTermination


@dataclass(frozen=True, slots=True)
class CommandStream:
    commands: tuple[Command, ...]
    cursor: int
    final_frame: int
    termination: StreamTermination
    unknown_bytes: int = 0

    @property
    def truncated(self) -> bool:
        return self.termination == StreamTermination.TRUNCATED_COMMAND


@dataclass(frozen=True, slots=True)
class CommandStreamDecoder:
    """Walk a command section, interleaving frame advances with typed commands.

    Frame-advance bytes:
      0x00        frame += 1
      0x01 n      frame += n (u8)
      0x02 n n    frame += n (u16 LE)

    Any other byte is looked up in the profile's opcode table. Known opcodes are
    parsed with their layout (opcode, player id, then typed fields) and emitted;
    unknown bytes are skipped one at a time so the walk can resynchronize.

    The walk stops at the end of the buffer, once the frame counter passes
    `frame_count`, when `max_commands` commands have been emitted, or when a
    command or frame skip runs past the end of the buffer. Commands decoded
    before the stop are always returned.
    """

    profile: EngineProfile = CLASSIC_PROFILE
    max_commands: int = MAX_COMMANDS

    def decode(self, stream: bytes, start: int, frame_count: int) -> CommandStream:
        data = bytes(stream)
        end = len(data)
        table = self.profile.opcode_table
        limit = int(self.max_commands)

        commands: list[Command] = []
        cursor = max(0, int(start))
        frame = 0
        unknown = 0
        termination = StreamTermination.END_OF_BUFFER

        while cursor < end:
            if frame > frame_count:
                termination = StreamTermination.FRAME_LIMIT
                break
            if len(commands) >= limit:
                termination = StreamTermination.COMMAND_CAP
                break

            byte = data[cursor]
            if byte == FRAME_STEP:
                frame += 1
                cursor += 1
                continue
            if byte == FRAME_SKIP_U8:
                if cursor + 1 >= end:
                    termination = StreamTermination.TRUNCATED_COMMAND
                    break
                frame += data[cursor + 1]
                cursor += 2
                continue
            if byte == FRAME_SKIP_U16:
                if cursor + 2 >= end:
                    termination = StreamTermination.TRUNCATED_COMMAND
                    break
                frame += data[cursor + 1] | (data[cursor + 2] << 8)
                cursor += 3
                continue

            info = table[byte]
            if info is None:
                unknown += 1
                cursor += 1
                continue

            try:
                parsed = info.layout.parse(data[cursor : cursor + MAX_COMMAND_LENGTH])
            except ConstructError:
                termination = StreamTermination.TRUNCATED_COMMAND
                break
            commands.append(
                Command(
                    frame=frame,
                    player_id=int(parsed.player_id),
                    opcode=info.opcode,
                    params=info.decode_params(parsed),
                    offset=cursor,
                )
            )
            cursor += int(parsed.end)

        return CommandStream(
            commands=tuple(commands),
            cursor=cursor,
            final_frame=frame,
            termination=termination,
            unknown_bytes=unknown,
        )


def decode_commands(
    stream: bytes,
    start: int,
    frame_count: int,
    *,
    profile: EngineProfile = CLASSIC_PROFILE,
    max_commands: int = MAX_COMMANDS,
) -> CommandStream:
    return CommandStreamDecoder(profile=profile, max_commands=max_commands).decode(stream, start, frame_count)

"""Tests for the execution engine."""

import random

import pytest

from chip8vm import (
    Engine, InvalidAddress, Mode, Op, Quirks, StackOverflow, StackUnderflow,
    UnknownInstruction,
)


class TestStep:
    """Fetch, decode and execute."""

    def test_handlers_cover_every_op(self, engine):
        """Every decodable operation has an instruction handler."""
        assert set(engine._handlers) == set(Op)

    def test_returns_instruction(self, engine, assemble):
        """step() executes one instruction, moves PC on and returns it."""
        engine.load(assemble(0x6A42))
        ins = engine.step()
        assert ins.op is Op.LD_VX_BYTE
        assert engine.machine.v[0xA] == 0x42
        assert engine.machine.pc == 0x202

    def test_unknown_instruction_is_fatal(self, engine, assemble):
        """An undecodable word raises and leaves PC on it."""
        engine.load(assemble(0x0123))
        with pytest.raises(UnknownInstruction):
            engine.step()
        assert engine.machine.pc == 0x200

    def test_runs_into_empty_memory(self, engine, assemble):
        """Running past the program into zeroed memory is an error."""
        engine.load(assemble(0x6001))
        engine.step()
        with pytest.raises(UnknownInstruction):
            engine.step()

    def test_load_resets_mode(self, engine, assemble):
        """Loading a new program stops waiting for a key."""
        engine.load(assemble(0xF00A))
        engine.step()
        assert engine.mode is Mode.WAITING_FOR_KEY
        engine.load(assemble(0x6001))
        assert engine.mode is Mode.RUNNING


class TestControlFlow:

    def test_jump(self, engine, run_program):
        """JP sets PC to the address."""
        m = run_program(engine, 0x1208)
        assert m.pc == 0x208

    def test_jump_unaligned(self, engine, assemble):
        """Jumping to an odd address is rejected."""
        engine.load(assemble(0x1201))
        with pytest.raises(InvalidAddress):
            engine.step()

    def test_jump_v0(self, engine, run_program):
        """JP V0 adds V0 to the address."""
        m = run_program(engine, 0x6004, 0xB300)
        assert m.pc == 0x304

    def test_jump_v0_past_memory(self, engine, assemble):
        """JP V0 landing past the end of memory is rejected."""
        engine.load(assemble(0x60FF, 0xBFFF))
        engine.step()
        with pytest.raises(InvalidAddress):
            engine.step()

    def test_jump_uses_vx_quirk(self, assemble):
        """With jump_uses_vx, Bxnn adds Vx instead of V0."""
        engine = Engine(quirks=Quirks(jump_uses_vx=True))
        engine.load(assemble(0x6304, 0x6006, 0xB300))
        engine.run(3)
        assert engine.machine.pc == 0x304

    def test_call_and_return(self, engine, assemble):
        """CALL pushes the return address and RET comes back to it."""
        image = assemble(0x2206, 0x6101, 0x1204, 0x6202, 0x00EE)
        engine.load(image)
        engine.step()
        assert engine.machine.pc == 0x206
        assert engine.machine.stack == [0x202]
        engine.run(3)
        m = engine.machine
        assert m.pc == 0x204
        assert (m.v[1], m.v[2]) == (1, 2)
        assert m.stack == []

    def test_return_with_empty_stack(self, engine, assemble):
        """RET with nothing on the stack underflows."""
        engine.load(assemble(0x00EE))
        with pytest.raises(StackUnderflow):
            engine.step()


def nested_calls(assemble, depth):
    """main calls sub 0, each sub k calls sub k+1 then returns.

    Subroutines start at 0x300, four bytes apart, so every call returns
    onto a RET.
    """
    main = assemble(0x2300, 0x1202)
    subs = b""
    for k in range(depth - 1):
        subs += assemble(0x2000 | (0x300 + 4 * (k + 1)), 0x00EE)
    subs += assemble(0x00EE)
    return main + bytes(0x100 - len(main)) + subs


class TestStackDepth:
    """Sixteen levels of subroutine are allowed, seventeen are not."""

    def test_sixteen_calls(self, engine, assemble):
        """Sixteen nested calls fit on the stack."""
        engine.load(nested_calls(assemble, 16))
        engine.run(16)
        assert engine.machine.sp == 16
        assert engine.machine.pc == 0x300 + 4 * 15

    def test_seventeenth_call_overflows(self, engine, assemble):
        """The seventeenth nested call overflows."""
        engine.load(nested_calls(assemble, 17))
        engine.run(16)
        with pytest.raises(StackOverflow):
            engine.step()

    def test_returns_in_lifo_order(self, engine, assemble):
        """Returns unwind the sixteen calls in reverse order."""
        engine.load(nested_calls(assemble, 16))
        engine.run(16)
        seen = []
        for _ in range(16):
            engine.step()
            seen.append(engine.machine.pc)
        assert seen == [0x300 + 4 * k + 2 for k in reversed(range(15))] + [0x202]
        assert engine.machine.stack == []


class TestSkips:

    @pytest.mark.parametrize("words,skipped", [
        ((0x6005, 0x3005), True),
        ((0x6005, 0x3006), False),
        ((0x6005, 0x4006), True),
        ((0x6005, 0x4005), False),
        ((0x6005, 0x6105, 0x5010), True),
        ((0x6005, 0x6106, 0x5010), False),
        ((0x6005, 0x6106, 0x9010), True),
        ((0x6005, 0x6105, 0x9010), False),
    ])
    def test_conditional_skip(self, engine, run_program, words, skipped):
        """Skip instructions jump over the next instruction only when their test holds."""
        m = run_program(engine, *words)
        assert m.pc == 0x200 + 2 * len(words) + (2 if skipped else 0)

    def test_skipped_instruction_not_executed(self, engine, run_program):
        """The skipped instruction has no effect."""
        m = run_program(engine, 0x6005, 0x3005, 0x6101, 0x6202, steps=3)
        assert m.v[1] == 0
        assert m.v[2] == 2

    @pytest.mark.parametrize("pressed,word,skipped", [
        (True, 0xE09E, True),
        (False, 0xE09E, False),
        (True, 0xE0A1, False),
        (False, 0xE0A1, True),
    ])
    def test_key_skips(self, engine, assemble, pressed, word, skipped):
        """SKP and SKNP follow the state of the key named by Vx."""
        engine.load(assemble(0x6007, word))
        engine.machine.set_key(7, pressed)
        engine.run(2)
        assert engine.machine.pc == (0x206 if skipped else 0x204)

    def test_key_skip_masks_register(self, engine, assemble):
        """Only the low nibble of Vx picks the key."""
        engine.load(assemble(0x6017, 0xE09E))
        engine.machine.set_key(7, True)
        engine.run(2)
        assert engine.machine.pc == 0x206


class TestArithmetic:
    """ALU instructions and the VF flag."""

    def test_load_and_add_immediate(self, engine, run_program):
        """ADD Vx, kk wraps at 8 bits and never touches VF."""
        m = run_program(engine, 0x6F07, 0x60FF, 0x7002)
        assert m.v[0] == 0x01
        assert m.v[0xF] == 7

    def test_load_register(self, engine, run_program):
        """LD Vx, Vy copies Vy."""
        m = run_program(engine, 0x61AB, 0x8010)
        assert m.v[0] == 0xAB

    @pytest.mark.parametrize("a,b,op,result,flag", [
        (0xFF, 0x02, 0x4, 0x01, 1),
        (0x01, 0x02, 0x4, 0x03, 0),
        (0x05, 0x03, 0x5, 0x02, 1),
        (0x04, 0x04, 0x5, 0x00, 1),
        (0x03, 0x05, 0x5, 0xFE, 0),
        (0x03, 0x05, 0x7, 0x02, 1),
        (0x05, 0x03, 0x7, 0xFE, 0),
    ])
    def test_add_sub(self, engine, run_program, a, b, op, result, flag):
        """Addition sets VF on carry, subtraction sets VF when there is no borrow."""
        m = run_program(engine, 0x6000 | a, 0x6100 | b, 0x8010 | op)
        assert m.v[0] == result
        assert m.v[0xF] == flag

    @pytest.mark.parametrize("op,result", [(0x1, 0x07), (0x2, 0x01), (0x3, 0x06)])
    def test_logic_keeps_flag(self, engine, run_program, op, result):
        """OR, AND and XOR leave VF alone by default."""
        m = run_program(engine, 0x6F05, 0x6003, 0x6105, 0x8010 | op)
        assert m.v[0] == result
        assert m.v[0xF] == 5

    @pytest.mark.parametrize("op", [0x1, 0x2, 0x3])
    def test_logic_resets_flag_cosmac(self, cosmac, run_program, op):
        """OR, AND and XOR clear VF under COSMAC quirks."""
        m = run_program(cosmac, 0x6F05, 0x6003, 0x6105, 0x8010 | op)
        assert m.v[0xF] == 0

    def test_shift_right_in_place(self, engine, run_program):
        """SHR shifts Vx itself and puts the low bit in VF."""
        m = run_program(engine, 0x6005, 0x6180, 0x8016)
        assert m.v[0] == 0x02
        assert m.v[0xF] == 1

    def test_shift_left_in_place(self, engine, run_program):
        """SHL shifts Vx itself and puts the high bit in VF."""
        m = run_program(engine, 0x6081, 0x801E)
        assert m.v[0] == 0x02
        assert m.v[0xF] == 1

    def test_shift_right_cosmac_reads_vy(self, cosmac, run_program):
        """Under COSMAC quirks SHR shifts Vy into Vx."""
        m = run_program(cosmac, 0x6005, 0x6180, 0x8016)
        assert m.v[0] == 0x40
        assert m.v[0xF] == 0

    def test_shift_left_cosmac_reads_vy(self, cosmac, run_program):
        """Under COSMAC quirks SHL shifts Vy into Vx."""
        m = run_program(cosmac, 0x6001, 0x61C0, 0x801E)
        assert m.v[0] == 0x80
        assert m.v[0xF] == 1

    def test_flag_register_as_destination(self, engine, run_program):
        """With VF as the destination, the carry flag is what remains."""
        m = run_program(engine, 0x6FFF, 0x6101, 0x8F14)
        assert m.v[0xF] == 1

    def test_flag_register_as_destination_result_last(self, run_program):
        """Writing the flag first leaves the sum in VF."""
        engine = Engine(quirks=Quirks(flag_after_result=False))
        m = run_program(engine, 0x6FFF, 0x6101, 0x8F14)
        assert m.v[0xF] == 0x00

    def test_random_is_masked(self, run_program):
        """RND ANDs a value from the engine's generator with kk."""
        m = run_program(Engine(rng=random.Random(42)), 0xC00F, 0xC100)
        assert m.v[0] == random.Random(42).randint(0, 255) & 0x0F
        assert m.v[1] == 0


class TestMemoryInstructions:

    def test_load_index(self, engine, run_program):
        """LD I sets the index register."""
        assert run_program(engine, 0xA123).i == 0x123

    def test_add_index(self, engine, run_program):
        """ADD I, Vx is 16 bit and leaves VF alone."""
        m = run_program(engine, 0x60FF, 0xAFFF, 0xF01E)
        assert m.i == 0x10FE
        assert m.v[0xF] == 0

    @pytest.mark.parametrize("value", [0x0A, 0x1A])
    def test_font_address(self, engine, run_program, value):
        """LD F points I at the glyph for the low nibble of Vx."""
        m = run_program(engine, 0x6000 | value, 0xF029)
        assert m.i == 0x50 + 5 * 0xA

    def test_bcd(self, engine, run_program):
        """LD B writes the hundreds, tens and ones of Vx."""
        m = run_program(engine, 0x6C9D, 0xA300, 0xFC33)
        assert list(m.memory[0x300:0x303]) == [1, 5, 7]

    def test_bcd_small_value(self, engine, run_program):
        """Leading zeros are written as digits."""
        m = run_program(engine, 0x6C07, 0xA300, 0xFC33)
        assert list(m.memory[0x300:0x303]) == [0, 0, 7]

    def test_bcd_past_memory(self, engine, assemble):
        """LD B running off the end of memory is rejected."""
        engine.load(assemble(0xAFFE, 0xF033))
        engine.step()
        with pytest.raises(InvalidAddress):
            engine.step()

    def test_store_registers(self, engine, run_program):
        """LD [I], Vx copies V0..Vx and leaves I unchanged."""
        m = run_program(engine, 0x6001, 0x6102, 0x6203, 0x6304, 0xA300, 0xF255)
        assert list(m.memory[0x300:0x304]) == [1, 2, 3, 0]
        assert m.i == 0x300

    def test_load_registers(self, engine, assemble):
        """LD Vx, [I] fills V0..Vx and leaves I unchanged."""
        engine.load(assemble(0xA300, 0xF165))
        engine.machine.write(0x300, b"\x09\x08\x07")
        engine.run(2)
        m = engine.machine
        assert list(m.v[:3]) == [9, 8, 0]
        assert m.i == 0x300

    def test_store_load_increment_index_cosmac(self, cosmac, run_program):
        """Under COSMAC quirks register store and load advance I."""
        m = run_program(cosmac, 0x6001, 0x6102, 0xA300, 0xF155, 0xF065)
        assert list(m.memory[0x300:0x302]) == [1, 2]
        assert m.i == 0x303
        assert m.v[0] == 0


class TestDraw:

    def test_draw_twice_restores(self, engine, assemble):
        """Drawing the same sprite twice erases it and reports the collision."""
        engine.load(assemble(0x6005, 0x6103, 0xA20C, 0xD011, 0xD011, 0x120A, 0xFF00))
        m = engine.machine
        before = m.read_framebuffer()
        engine.run(4)
        assert m.v[0xF] == 0
        assert m.dirty
        assert m.read_framebuffer()[3][5:13] == b"\x01" * 8
        engine.step()
        assert m.v[0xF] == 1
        assert m.read_framebuffer() == before

    def test_draw_font_glyph(self, engine, run_program):
        """A font glyph drawn from the font table lands at the origin."""
        m = run_program(engine, 0x6000, 0xF029, 0xD125)
        fb = m.read_framebuffer()
        # "0" is a 4 pixel wide box
        assert fb[0][:5] == b"\x01\x01\x01\x01\x00"
        assert fb[1][:5] == b"\x01\x00\x00\x01\x00"

    def test_draw_past_memory(self, engine, assemble):
        """A sprite read past the end of memory is rejected."""
        engine.load(assemble(0xAFFF, 0xD015))
        engine.step()
        with pytest.raises(InvalidAddress):
            engine.step()

    def test_clear(self, engine, run_program):
        """CLS blanks the screen and marks it changed."""
        m = run_program(engine, 0x6000, 0xF029, 0xD125, 0x00E0)
        assert m.dirty
        assert not any(any(row) for row in m.read_framebuffer())


class TestTimers:

    def test_delay_round_trip(self, engine, run_program):
        """The delay timer can be set from and read back into registers."""
        m = run_program(engine, 0x6009, 0xF015, 0xF107)
        assert m.delay_timer == 9
        assert m.v[1] == 9

    def test_sound_timer_drives_audio(self, engine, run_program):
        """Audio stays active until the sound timer reaches zero."""
        m = run_program(engine, 0x6002, 0xF018)
        assert m.audio_active
        engine.tick_timers()
        assert m.audio_active
        engine.tick_timers()
        assert not m.audio_active

    def test_one_second_of_ticks(self, engine, run_program):
        """Sixty ticks take 70 down to 10 and further ticks stop at zero."""
        m = run_program(engine, 0x6046, 0xF015, 0xF018)
        for _ in range(60):
            engine.tick_timers()
        assert m.delay_timer == 10
        assert m.sound_timer == 10
        for _ in range(25):
            engine.tick_timers()
        assert m.delay_timer == 0
        assert m.sound_timer == 0


class TestKeyWait:
    """Fx0A waits for a key without blocking the caller."""

    def test_waits_then_resumes(self, engine, assemble):
        """LD Vx, K holds PC until a key goes down, then stores it."""
        engine.load(assemble(0xF50A, 0x1202))
        m = engine.machine
        engine.step()
        assert engine.mode is Mode.WAITING_FOR_KEY
        assert m.pc == 0x200
        for _ in range(5):
            assert engine.step() is None
            assert m.pc == 0x200
            assert engine.mode is Mode.WAITING_FOR_KEY

        m.set_key(7, True)
        engine.step()
        assert engine.mode is Mode.RUNNING
        assert m.v[5] == 7
        assert m.pc == 0x202

    def test_held_key_must_be_pressed_again(self, engine, assemble):
        """A key held when the wait starts must be released and pressed."""
        engine.load(assemble(0xF50A, 0x1202))
        m = engine.machine
        m.set_key(3, True)
        engine.run(3)
        assert engine.mode is Mode.WAITING_FOR_KEY
        m.set_key(3, False)
        engine.step()
        m.set_key(3, True)
        engine.step()
        assert engine.mode is Mode.RUNNING
        assert m.v[5] == 3

    def test_timers_run_while_waiting(self, engine, assemble):
        """Timers keep counting during a key wait."""
        engine.load(assemble(0x6005, 0xF015, 0xF00A))
        engine.run(3)
        engine.tick_timers()
        assert engine.mode is Mode.WAITING_FOR_KEY
        assert engine.machine.delay_timer == 4

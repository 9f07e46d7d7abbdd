# CHIP-8 INFO
# https://chip-8.github.io/extensions/#chip-8
# https://chip-8.github.io/links/
#
# COMPATIBILITY QUIRKS TABLE
# https://games.gulrak.net/cadmium/chip8-opcode-table.html#quirk6
#
# MASTERING CHIP-8
# https://github.com/mattmikolay/chip-8/wiki/Mastering-CHIP%E2%80%908
#
# TEST SUITE
# https://github.com/Timendus/chip8-test-suite


import argparse
import logging
import random
import sys
import time
from collections import Counter, namedtuple
from functools import wraps

import os
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "no welcome message"   # this env var disable pygame's welcome message when imported
import pygame

from peripherals import SCALE, SCREEN_HEIGHT, SCREEN_WIDTH, SAMPLE_RATE, SAMPLE_SIZE, Keypad, Screen, Speaker


logger = logging.getLogger(__name__)


# ******************** STATIC SECTION
ROM_START_ADDRESS = 0x200
MEMORY_SIZE = 4096
ADDRESS_MASK = MEMORY_SIZE - 1
MAX_ROM_SIZE = MEMORY_SIZE - ROM_START_ADDRESS
STACK_SIZE = 16
DEBUG = True if int(os.getenv('DEBUG', 0)) >= 1 else False
IPS = 700                       # instructions per second
TIMER_HZ = 60
TIMER_INTERVAL = 1.0 / TIMER_HZ


# ******************** UTILITIES SECTION
def asm(msg):
    """decorator to log the ASM of the instruction being called"""
    def decorator(fn):
        @wraps(fn)
        def wrapper_fn(*args, **kwargs):
            mem_addr = (args[0].pc - 2) & 0xFFFF    # args[0] equals self, the pc has already moved past the instruction
            vals = fn(*args, **kwargs)              # use the locals() values of each decorated function in the log
            if logger.isEnabledFor(logging.DEBUG):
                vals['mem_addr'] = mem_addr
                logger.debug(msg.format(**vals))
        return wrapper_fn
    return decorator

def positive_int(value):
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"{value} is not a positive integer")
    return number

def get_args(argv=None):
    parser = argparse.ArgumentParser(description="CHIP-8 interpreter")
    parser.add_argument("rom", help="input rom file")
    parser.add_argument("--ips", type=positive_int, default=IPS, help=f"instructions executed per second (default {IPS})")
    parser.add_argument("--scale", type=positive_int, default=SCALE, help=f"size in pixels of a CHIP-8 pixel (default {SCALE})")
    parser.add_argument("--mute", action="store_true", help="do not open the audio device")
    parser.add_argument("--debug", action="store_true", default=DEBUG, help="log every executed instruction")
    return parser.parse_args(argv)

def setup_logging(debug=False):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="[%(levelname)s] %(message)s",
        stream=sys.stdout,
    )


# ******************** MEMORY SECTION
# ********** WRAPS A FIXED ARRAY TO REPRESENT A STACK WITH A LIMITED SIZE OF 16 ADDRESSES
class Stack:
    def __init__(self):
        self.addr_list = [0] * STACK_SIZE
        self.pointer = 0

    def __len__(self):
        return self.pointer

    def __repr__(self):
        return f"Stack({self.addr_list[:self.pointer]})"

    def append(self, address):
        if self.pointer >= STACK_SIZE:
            raise IndexError(f"The CHIP-8 stack can contain at most {STACK_SIZE} addresses. Stack overflow")
        self.addr_list[self.pointer] = address & 0xFFFF
        self.pointer += 1

    def pop(self):
        if self.pointer == 0:
            raise IndexError("The CHIP-8 stack is empty. Stack underflow")
        self.pointer -= 1
        return self.addr_list[self.pointer]

    def clear(self):
        self.addr_list = [0] * STACK_SIZE
        self.pointer = 0

# ********** WRAPS A BYTEARRAY TO REPRESENT THE MAIN MEMORY WITH A LIMITED SIZE OF 4KB
# addresses wrap around at 4KB, so an index register pointing past 0xFFF never goes out of bounds
class Memory:
    def __init__(self):
        self.inner = bytearray(MEMORY_SIZE)

    def __len__(self):
        return len(self.inner)

    def __setitem__(self, key, value):
        self.inner[key & ADDRESS_MASK] = value & 0xFF

    def __getitem__(self, index):
        return self.inner[index & ADDRESS_MASK]

    def clear(self):
        self.inner[:] = bytes(MEMORY_SIZE)

    def load_rom(self, path):
        """
        load ROM file from user specified path at 0x200 and return its size
        an unreadable file raises OSError, a file that doesn't fit in memory raises ValueError
        """
        with open(path, mode='rb') as f:
            rom = f.read()
        if len(rom) > MAX_ROM_SIZE:
            raise ValueError(f"The ROM at path {path} is {len(rom)} bytes long, at most {MAX_ROM_SIZE} bytes fit in memory")
        self.inner[ROM_START_ADDRESS:ROM_START_ADDRESS+len(rom)] = rom
        logger.info(f"The ROM at path {path} has been loaded successfully ({len(rom)} bytes)")
        return len(rom)


# ******************** DECODER SECTION
Instruction = namedtuple("Instruction", ["word", "op", "x", "y", "n", "nn", "nnn"])

def decode(word):
    """split a 16 bit instruction word in its nibble fields"""
    word &= 0xFFFF
    return Instruction(
        word=word,
        op=(word >> 12) & 0xF,
        x=(word >> 8) & 0xF,
        y=(word >> 4) & 0xF,
        n=word & 0xF,
        nn=word & 0xFF,
        nnn=word & 0xFFF,
    )


# ******************** CPU SECTION
class Chip8:
    def __init__(self, seed=None):
        self.rng = random.Random(seed)     # seeded once, reset() doesn't touch it
        self.mem = Memory()
        self.stack = Stack()
        self.faults = Counter()
        self.reset()
        self.instructions = {
            0x00E0: self._clear_screen,
            0x00EE: self._return,
            0x1000: self._jump,
            0x2000: self._call_addr,
            0x3000: self._skip_if_eq,
            0x4000: self._skip_if_not_eq,
            0x5000: self._skip_if_eq_regs,
            0x6000: self._set_vk,
            0x7000: self._add_to_vk,
            0x8000: self._set_vx_to_vy,
            0x8001: self._set_vx_or_vy,
            0x8002: self._set_vx_and_vy,
            0x8003: self._set_vx_xor_vy,
            0x8004: self._add_vx_vy,
            0x8005: self._sub_vx_vy,
            0x8006: self._shr,
            0x8007: self._subn_vx_vy,
            0x800E: self._shl,
            0x9000: self._skip_if_not_eq_regs,
            0xA000: self._set_idx,
            0xB000: self._jump_plus,
            0xC000: self._random_byte_and,
            0xD000: self._to_screen,
            0xE09E: self._skip_if_pressed,
            0xE0A1: self._skip_if_not_pressed,
            0xF007: self._set_vx_dt,
            0xF00A: self._wait_keypress,
            0xF015: self._set_dt_vx,
            0xF018: self._set_st,
            0xF01E: self._add_to_idx,
            0xF033: self._bcd_repr,
            0xF055: self._store_vregs,
            0xF065: self._load_vregs,
        }

    def __str__(self):
        registers = f"PC_REGISTER:0x{self.pc:04x} | IDX_REGISTER:0x{self.idx:04x} | VARIABLE_REGISTERS:{list(self.v_regs)}"
        timers = f"DT:{self.dt} | ST:{self.st}"
        stack = f"STACK:{self.stack}"
        keys = f"KEYPAD:{[k for k, pressed in enumerate(self.keypad) if pressed]}"
        flags = f"DRAW:{self.draw} | FAULTS:{dict(self.faults)}"
        return f"{registers}\n{timers}\n{stack}\n{keys}\n{flags}"

    def reset(self):
        """bring the machine back to its power-on state, memory included"""
        self.mem.clear()
        self.stack.clear()
        self.v_regs = bytearray(16)
        self.vram = bytearray(SCREEN_WIDTH * SCREEN_HEIGHT)
        self.keypad = [False] * 16
        self.pc = ROM_START_ADDRESS
        self.idx = 0    # specify where the sprites reside in memory
        self.dt = 0     # delay timer, active when non-zero
        self.st = 0     # sound timer, active when non-zero
        self.draw = False
        self.faults.clear()
        logger.debug("Initialized CHIP-8 state")

    def _fault(self, kind, msg, level=logging.ERROR, mem_addr=None):
        """record a recoverable runtime error, the machine keeps running"""
        if mem_addr is None:
            mem_addr = self.pc - 2     # handlers run after fetch moved pc past the instruction
        self.faults[kind] += 1
        logger.log(level, f"{msg} (mem_addr: 0x{mem_addr & 0xFFFF:04x})")

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: CLS")
    def _clear_screen(self, ins):
        self.vram[:] = bytes(len(self.vram))
        self.draw = True
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: RET")
    def _return(self, ins):
        """return from a subroutine"""
        try:
            self.pc = self.stack.pop()
        except IndexError as err:
            self._fault("stack_underflow", str(err))
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: JP 0x{ins.nnn:04x}")
    def _jump(self, ins):
        self.pc = ins.nnn
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: CALL 0x{ins.nnn:04x}")
    def _call_addr(self, ins):
        try:
            self.stack.append(self.pc)
        except IndexError as err:
            self._fault("stack_overflow", str(err))
        else:
            self.pc = ins.nnn
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SE V{ins.x:X}, 0x{ins.nn:02x}")
    def _skip_if_eq(self, ins):
        if self.v_regs[ins.x] == ins.nn:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SNE V{ins.x:X}, 0x{ins.nn:02x}")
    def _skip_if_not_eq(self, ins):
        if self.v_regs[ins.x] != ins.nn:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SE V{ins.x:X}, V{ins.y:X}")
    def _skip_if_eq_regs(self, ins):
        if self.v_regs[ins.x] == self.v_regs[ins.y]:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SNE V{ins.x:X}, V{ins.y:X}")
    def _skip_if_not_eq_regs(self, ins):
        if self.v_regs[ins.x] != self.v_regs[ins.y]:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{ins.x:X}, 0x{ins.nn:02x}")
    def _set_vk(self, ins):
        """set the value of one of the 16 variable registers, Vx"""
        self.v_regs[ins.x] = ins.nn
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD V{ins.x:X}, 0x{ins.nn:02x}")
    def _add_to_vk(self, ins):
        """add to the value already present in one of the variable registers, VF is left alone"""
        self.v_regs[ins.x] = (self.v_regs[ins.x] + ins.nn) & 0xFF
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{ins.x:X}, V{ins.y:X}")
    def _set_vx_to_vy(self, ins):
        """set the value of Vx equal to that of Vy"""
        self.v_regs[ins.x] = self.v_regs[ins.y]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: OR V{ins.x:X}, V{ins.y:X}")
    def _set_vx_or_vy(self, ins):
        """set the value of Vx to Vx OR Vy"""
        self.v_regs[ins.x] |= self.v_regs[ins.y]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: AND V{ins.x:X}, V{ins.y:X}")
    def _set_vx_and_vy(self, ins):
        """set the value of Vx to Vx AND Vy"""
        self.v_regs[ins.x] &= self.v_regs[ins.y]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: XOR V{ins.x:X}, V{ins.y:X}")
    def _set_vx_xor_vy(self, ins):
        """set the value of Vx to Vx XOR Vy"""
        self.v_regs[ins.x] ^= self.v_regs[ins.y]
        return locals()

    # the flag is always the last write: with x == 0xF the result gets overwritten by the flag

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD V{ins.x:X}, V{ins.y:X}")
    def _add_vx_vy(self, ins):
        """set the value of Vx to Vx + Vy, VF = carry"""
        total = self.v_regs[ins.x] + self.v_regs[ins.y]
        self.v_regs[ins.x] = total & 0xFF     # keep only the lowest 8 bits from the result and store them in Vx
        self.v_regs[0xF] = 1 if total > 255 else 0
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SUB V{ins.x:X}, V{ins.y:X}")
    def _sub_vx_vy(self, ins):
        """set the value of Vx to Vx - Vy, VF = NOT borrow"""
        flag = 1 if self.v_regs[ins.x] >= self.v_regs[ins.y] else 0
        self.v_regs[ins.x] = (self.v_regs[ins.x] - self.v_regs[ins.y]) & 0xFF
        self.v_regs[0xF] = flag
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SHR V{ins.x:X}, V{ins.y:X}")
    def _shr(self, ins):
        """set Vx equal to Vy SHR 1"""
        self.v_regs[ins.x] = self.v_regs[ins.y]     # compatibility quirk 2
        lsb = self.v_regs[ins.x] & 0x1
        self.v_regs[ins.x] >>= 1
        self.v_regs[0xF] = lsb
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SUBN V{ins.x:X}, V{ins.y:X}")
    def _subn_vx_vy(self, ins):
        """set the value of Vx to Vy - Vx, VF = NOT borrow"""
        flag = 1 if self.v_regs[ins.y] >= self.v_regs[ins.x] else 0
        self.v_regs[ins.x] = (self.v_regs[ins.y] - self.v_regs[ins.x]) & 0xFF
        self.v_regs[0xF] = flag
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SHL V{ins.x:X}, V{ins.y:X}")
    def _shl(self, ins):
        """set Vx equal to Vy SHL 1"""
        self.v_regs[ins.x] = self.v_regs[ins.y]     # compatibility quirk 2
        msb = (self.v_regs[ins.x] & 0x80) >> 7
        self.v_regs[ins.x] = (self.v_regs[ins.x] << 1) & 0xFF   # multiply by 2 and keep only the lowest 8 bits from the result
        self.v_regs[0xF] = msb
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD I, 0x{ins.nnn:04x}")
    def _set_idx(self, ins):
        """set the value of the I register"""
        self.idx = ins.nnn
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: JP V0, 0x{ins.nnn:04x}")
    def _jump_plus(self, ins):
        self.pc = (self.v_regs[0x0] + ins.nnn) & 0xFFFF
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: RND V{ins.x:X}, 0x{ins.nn:02x}")
    def _random_byte_and(self, ins):
        rnd = self.rng.randint(0, 255)
        self.v_regs[ins.x] = rnd & ins.nn
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: DRW V{ins.x:X}, V{ins.y:X}, {ins.n}")
    def _to_screen(self, ins):
        """display n-byte sprite starting at memory location I at (Vx, Vy), set VF = collision"""
        x, y = self.v_regs[ins.x] % SCREEN_WIDTH, self.v_regs[ins.y] % SCREEN_HEIGHT
        collision = 0
        # step through each sprite byte, rows below the bottom edge are clipped
        for row in range(ins.n):
            y_coordinate = y + row
            if y_coordinate >= SCREEN_HEIGHT:
                break
            sprite_byte = self.mem[self.idx + row]
            # columns past the right edge are clipped as well, nothing wraps around
            for col in range(8):
                x_coordinate = x + col
                if x_coordinate >= SCREEN_WIDTH:
                    break
                if (sprite_byte >> (7 - col)) & 0x1:
                    pos = y_coordinate * SCREEN_WIDTH + x_coordinate
                    # sprites are XORed onto the existing screen and if this
                    # causes any pixel to be erased then VF=1, otherwise VF=0
                    if self.vram[pos]:
                        collision = 1
                    self.vram[pos] ^= 1
        self.v_regs[0xF] = collision
        self.draw = True
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SKP V{ins.x:X}")
    def _skip_if_pressed(self, ins):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is pressed"""
        key = self.v_regs[ins.x] & 0xF
        if self.keypad[key]:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SKNP V{ins.x:X}")
    def _skip_if_not_pressed(self, ins):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is NOT pressed"""
        key = self.v_regs[ins.x] & 0xF
        if not self.keypad[key]:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{ins.x:X}, DT")
    def _set_vx_dt(self, ins):
        """set Vx = DT (delay timer) value"""
        self.v_regs[ins.x] = self.dt
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{ins.x:X}, K")
    def _wait_keypress(self, ins):
        """wait for a key press and store its value in Vx"""
        for key, pressed in enumerate(self.keypad):
            if pressed:
                self.v_regs[ins.x] = key
                return locals()
        self.pc = (self.pc - 0x2) & 0xFFFF      # stay on the same instruction until a key is pressed
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD DT, V{ins.x:X}")
    def _set_dt_vx(self, ins):
        """set DT (delay timer) = Vx"""
        self.dt = self.v_regs[ins.x]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD ST, V{ins.x:X}")
    def _set_st(self, ins):
        """set ST (sound timer) = Vx"""
        self.st = self.v_regs[ins.x]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD I, V{ins.x:X}")
    def _add_to_idx(self, ins):
        """set I = I + Vx"""
        self.idx = (self.idx + self.v_regs[ins.x]) & 0xFFFF
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD B, V{ins.x:X}")
    def _bcd_repr(self, ins):
        """store the hundreds digit of Vx in memory at I, the tens digit at I+1, the ones digit at I+2"""
        value = self.v_regs[ins.x]
        self.mem[self.idx] = value // 100
        self.mem[self.idx + 1] = (value // 10) % 10
        self.mem[self.idx + 2] = value % 10
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD [I], V{ins.x:X}")
    def _store_vregs(self, ins):
        """store registers V0 through Vx (included) in memory starting at location I"""
        for i in range(ins.x + 1):
            self.mem[self.idx + i] = self.v_regs[i]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{ins.x:X}, [I]")
    def _load_vregs(self, ins):
        """read registers V0 through Vx (included) from memory starting at location I"""
        for i in range(ins.x + 1):
            self.v_regs[i] = self.mem[self.idx + i]
        return locals()

    def _goto_next_instruction(self):
        self.pc = (self.pc + 0x2) & 0xFFFF

    @staticmethod
    def _dispatch_key(ins):
        """families 0, E and F are told apart by their low byte, family 8 by its low nibble"""
        if ins.op in (0x0, 0xE, 0xF):
            return ins.op << 12 | ins.nn
        if ins.op == 0x8:
            return ins.op << 12 | ins.n
        return ins.op << 12

    def fetch(self):
        """read the two bytes instruction at pc and move pc past it"""
        if self.pc + 1 > ADDRESS_MASK:
            self._fault("pc_out_of_range", f"Program counter 0x{self.pc:04x} is outside of memory, wrapping it",
                        logging.WARNING, mem_addr=self.pc)
            self.pc &= ADDRESS_MASK
        opcode = self.mem[self.pc] << 8 | self.mem[self.pc + 1]
        self._goto_next_instruction()
        return opcode

    def execute(self, ins):
        """run the handler of a decoded instruction, unknown instructions are skipped"""
        instruction = self.instructions.get(self._dispatch_key(ins))
        if instruction is None:
            self._fault("unknown_opcode", f"Unknown or unimplemented instruction 0x{ins.word:04x}", logging.WARNING)
            return
        instruction(ins)

    def step(self):
        """emulate one machine cycle (fetch opcode, decode opcode, execute opcode)"""
        self.draw = False
        ins = decode(self.fetch())
        self.execute(ins)
        return ins

    def decrement_timers(self):
        if self.dt > 0:
            self.dt -= 1
        if self.st > 0:
            self.st -= 1


# ******************** TIMING SECTION
class Scheduler:
    """
    paces a Chip8 to a fixed instructions per second rate and counts down
    its delay/sound timers at 60 Hz, whatever the number of instructions run meanwhile

    clock and sleep are injectable so the pacing can be driven by a fake time source
    """
    def __init__(self, chip, ips=IPS, clock=time.perf_counter, sleep=time.sleep):
        if ips <= 0:
            raise ValueError(f"Instructions per second must be positive, got {ips}")
        self.chip = chip
        self.ips = ips
        self.instruction_interval = 1.0 / ips
        self.clock = clock
        self.sleep = sleep
        self.timer_accumulator = 0.0
        self.last_tick = None

    def tick(self):
        """run one instruction, update the timers and sleep for what's left of the instruction slot"""
        start = self.clock()
        if self.last_tick is None:
            self.last_tick = start
        self.chip.step()
        end = self.clock()
        elapsed = end - start
        # wall time since the previous tick ended, the previous pacing sleep included
        self.timer_accumulator += end - self.last_tick
        while self.timer_accumulator >= TIMER_INTERVAL:
            self.chip.decrement_timers()
            self.timer_accumulator -= TIMER_INTERVAL
        self.last_tick = end
        remaining = self.instruction_interval - elapsed
        if remaining > 0:
            self.sleep(remaining)
        return remaining


# ******************** ENTRY POINT SECTION
def main(argv=None):
    args = get_args(argv)
    setup_logging(args.debug)
    # CPU
    chip = Chip8()
    try:
        chip.mem.load_rom(args.rom)
    except (OSError, ValueError) as err:
        sys.exit(f"Error loading ROM: {err}")
    # pygame initialization
    pygame.mixer.pre_init(SAMPLE_RATE, SAMPLE_SIZE, 1, 512)
    pygame.init()
    try:
        pygame.display.set_caption(os.path.basename(args.rom))
        # IO
        s = Screen(s=args.scale)
        sp = None if args.mute else Speaker()
    except pygame.error as err:
        pygame.quit()
        sys.exit(f"Couldn't initialize the display or the audio device: {err}")
    k = Keypad()
    scheduler = Scheduler(chip, ips=args.ips)
    # emulation loop
    run = True
    try:
        while run:
            # loop through the event queue, this also refreshes the keyboard state
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    run = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    run = False
            k.poll(chip.keypad)
            scheduler.tick()
            if chip.draw:
                s.render(chip.vram)
            if sp is not None:
                sp.update(chip.st)
    finally:
        if chip.faults:
            logger.info(f"Recoverable faults during the run: {dict(chip.faults)}")
        logger.debug(f"Machine state at exit\n{chip}")
        pygame.quit()


if __name__ == "__main__":
    main()

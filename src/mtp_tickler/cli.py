from concurrent.futures import ThreadPoolExecutor
import logging
from typing import List, Optional

import click
from rich.console import Console
import structlog

from mtp_tickler import samples
from mtp_tickler.algorithm.decoder import decode_corpus, decode_with_keystream, recovery_stats, PLACEHOLDER
from mtp_tickler.algorithm.keystream_builder import build_keystream
from mtp_tickler.block_modes import cbc_decrypt, ctr_decrypt, unpad_pkcs5
from mtp_tickler.models.keystream import Keystream
from mtp_tickler.state_queue import LatestStateQueue
from mtp_tickler.state_snapshot import RecoveryState
from mtp_tickler.ui import render_result, ui_loop
from mtp_tickler.utils import (
    decode_ciphertext,
    load_corpus,
    CiphertextFormat,
    CiphertextFormatError,
    CIPHERTEXT_FORMATS,
)

ENV_PREFIX = "MTP_TICKLER"
KEYSTREAM_PREFIX = "keystream: "

log = structlog.get_logger()
console = Console()


def configure_logging(verbose: bool) -> None:
    """Filter structlog output at INFO, or DEBUG when verbose."""
    level = logging.DEBUG if verbose else logging.INFO
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))


@click.group(context_settings={"auto_envvar_prefix": ENV_PREFIX})
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    configure_logging(verbose)


def recover_keystream(corpus: List[bytes], length: int, live: bool, seed: Optional[Keystream] = None) -> Keystream:
    """Build the keystream, optionally showing progress in a live view."""
    if not live:
        return build_keystream(corpus, length, seed=seed)

    state_queue: LatestStateQueue[RecoveryState] = LatestStateQueue()

    def run() -> Keystream:
        try:
            return build_keystream(corpus, length, seed=seed, on_progress=state_queue.publish)
        finally:
            # Always close the queue so the UI can exit
            state_queue.close()

    with ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(run)
        try:
            ui_loop(state_queue, console)
        except KeyboardInterrupt:
            state_queue.close()
        return future.result()


def report(
    corpus: List[bytes],
    target: int,
    keystream: Keystream,
    *,
    placeholder: str,
    show_all: bool,
    output: Optional[str] = None,
) -> None:
    stats = recovery_stats(keystream)
    target_plaintext = decode_with_keystream(corpus[target], keystream, placeholder)
    log.info("keystream recovered", known=stats.known, total=stats.total, corpus=len(corpus))

    if show_all:
        plaintexts = decode_corpus(corpus, keystream, placeholder)
        labels = [f"{i}*" if i == target % len(corpus) else str(i) for i in range(len(corpus))]
    else:
        plaintexts = [target_plaintext]
        labels = ["target"]
    console.print(render_result(plaintexts, keystream, labels=labels))

    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(f"{KEYSTREAM_PREFIX}{keystream.hex()}\n")
            f.write(f"plaintext: {target_plaintext}\n")
        log.info("wrote result", path=output)


def resolve_target(corpus: List[bytes], target: int) -> int:
    if not -len(corpus) <= target < len(corpus):
        raise click.BadParameter(f"target {target} is outside a corpus of {len(corpus)}", param_hint="--target")
    return target


def load_resume(path: str) -> Keystream:
    """Read the keystream line of a file written by --output."""
    with open(path, encoding="utf-8") as f:
        for line in f:
            if line.startswith(KEYSTREAM_PREFIX):
                try:
                    return Keystream.from_hex(line[len(KEYSTREAM_PREFIX):])
                except ValueError as e:
                    raise click.ClickException(f"{path}: {e}")
    raise click.ClickException(f"No keystream line found in {path}")


@cli.command()
@click.argument("corpus_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "-f", "ciphertext_format", type=click.Choice(CIPHERTEXT_FORMATS), default="hex")
@click.option("--target", "-t", type=int, default=-1, show_default=True, help="Index of the message to decode")
@click.option("--length", "-n", type=click.IntRange(min=0), help="Keystream length (default: target length)")
@click.option("--placeholder", default=PLACEHOLDER, show_default=True, help="Character for unknown bytes")
@click.option("--all", "show_all", is_flag=True, help="Decode every message, not only the target")
@click.option("--live/--no-live", default=False, help="Show recovery progress")
@click.option("--output", "-o", type=click.Path(dir_okay=False, writable=True), help="Write keystream and plaintext")
@click.option("--resume", "-r", type=click.Path(exists=True, dir_okay=False), help="Keep the keystream from an earlier --output file")
def recover(
    corpus_path: str,
    ciphertext_format: CiphertextFormat,
    target: int,
    length: Optional[int],
    placeholder: str,
    show_all: bool,
    live: bool,
    output: Optional[str],
    resume: Optional[str],
):
    """Recover a shared keystream from CORPUS_PATH (one ciphertext per line) and decode the target."""
    try:
        corpus = load_corpus(corpus_path, ciphertext_format)
    except CiphertextFormatError as e:
        raise click.ClickException(str(e))
    if not corpus:
        raise click.ClickException(f"No ciphertexts found in {corpus_path}")
    if len(corpus) < 3:
        log.warning("corpus has fewer than three messages, nothing can be resolved", corpus=len(corpus))

    target = resolve_target(corpus, target)
    if length is None:
        length = len(corpus[target])

    seed = load_resume(resume) if resume else None
    if seed is not None:
        log.info("resuming keystream", path=resume, known=seed.known_count, total=len(seed))

    keystream = recover_keystream(corpus, length, live, seed=seed)
    report(corpus, target, keystream, placeholder=placeholder, show_all=show_all, output=output)


@cli.command()
@click.option("--all", "show_all", is_flag=True, help="Decode every message, not only the target")
@click.option("--live/--no-live", default=False, help="Show recovery progress")
def demo(show_all: bool, live: bool):
    """Run keystream recovery on the built-in eleven-message sample."""
    corpus = samples.many_time_pad_corpus()
    target = samples.MANY_TIME_PAD_TARGET_INDEX
    keystream = recover_keystream(corpus, len(corpus[target]), live)
    report(corpus, target, keystream, placeholder=PLACEHOLDER, show_all=show_all)


def decode_hex_option(value: str, name: str) -> bytes:
    try:
        return decode_ciphertext(value, "hex")
    except CiphertextFormatError as e:
        raise click.BadParameter(str(e), param_hint=name)


def print_plaintext(label: str, plaintext: bytes) -> None:
    console.print(f"{label}: {plaintext.decode('utf-8', errors='replace')}", markup=False, soft_wrap=True)


@cli.command("cbc-decrypt")
@click.option("--key", "-k", required=True, help="AES key (hex)")
@click.option("--ciphertext", "-c", required=True, help="IV followed by ciphertext (hex)")
@click.option("--keep-padding", is_flag=True, help="Do not strip PKCS#5 padding")
def cbc_decrypt_command(key: str, ciphertext: str, keep_padding: bool):
    """Decrypt AES-CBC with a known key."""
    try:
        plaintext = cbc_decrypt(decode_hex_option(key, "--key"), decode_hex_option(ciphertext, "--ciphertext"))
    except ValueError as e:
        raise click.ClickException(str(e))

    if not keep_padding:
        unpadded = unpad_pkcs5(plaintext)
        if unpadded is None:
            raise click.ClickException("invalid padding (wrong key or corrupted ciphertext)")
        plaintext = unpadded
    print_plaintext("plaintext", plaintext)


@cli.command("ctr-decrypt")
@click.option("--key", "-k", required=True, help="AES key (hex)")
@click.option("--ciphertext", "-c", required=True, help="Initial counter followed by ciphertext (hex)")
def ctr_decrypt_command(key: str, ciphertext: str):
    """Decrypt AES-CTR with a known key."""
    try:
        plaintext = ctr_decrypt(decode_hex_option(key, "--key"), decode_hex_option(ciphertext, "--ciphertext"))
    except ValueError as e:
        raise click.ClickException(str(e))
    print_plaintext("plaintext", plaintext)


@cli.command("modes-demo")
def modes_demo():
    """Decrypt the built-in AES-CBC and AES-CTR questions."""
    for number, (mode, key_hex, ciphertext_hex) in enumerate(samples.BLOCK_MODE_QUESTIONS, start=1):
        key = bytes.fromhex(key_hex)
        ciphertext = bytes.fromhex(ciphertext_hex)
        if mode == "cbc":
            plaintext = unpad_pkcs5(cbc_decrypt(key, ciphertext))
        else:
            plaintext = ctr_decrypt(key, ciphertext)

        if plaintext is None:
            log.error("invalid padding", question=number, mode=mode)
            continue
        print_plaintext(f"Question {number} ({mode.upper()})", plaintext)


if __name__ == "__main__":
    cli()

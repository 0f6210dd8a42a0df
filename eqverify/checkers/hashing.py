"""Hash/equality coherence."""

from __future__ import annotations

from eqverify.checkers.base import (
    Checker,
    CheckContext,
    CheckerId,
    CheckerResult,
    compare,
    guarded,
)
from eqverify.logging import get_logger

# smallest sample for which identical hashes are worth a note
MIN_COLLISION_SAMPLE = 3


class HashCoherenceChecker(Checker):
    """Equal instances must have equal hashes.

    Unhashable classes (``__hash__ = None``) satisfy the clause trivially.
    Unequal instances may collide, but a sample in which every unequal
    instance hashes identically is reported as a warning.
    """

    checker_id = CheckerId.HASH_COHERENCE
    description = "Equal instances hash equally"

    def check(self, context: CheckContext) -> CheckerResult:
        if not context.descriptor.is_hashable:
            get_logger().debug(f"{context.name} is unhashable", category="hash")
            return self.ok()
        synth = context.synthesizer
        reference = synth.synthesize(context.descriptor)
        sample = [(None, synth.clone_identical(reference))]
        sample += [(m.name, synth.twin(reference, m)) for m in context.descriptor.members]
        sample.append(
            (None, synth.synthesize(context.descriptor, synth.black_values(context.descriptor)))
        )

        reference_hash, error = guarded(lambda: hash(reference.value))
        if error is not None:
            return self.raised("hash()", error)
        unequal_hashes = []
        for member, other in sample:
            equal, error = guarded(lambda: compare(reference.value, other.value))
            if error is not None:
                return self.raised("Comparison", error, member)
            other_hash, error = guarded(lambda: hash(other.value))
            if error is not None:
                return self.raised("hash()", error, member)
            if equal and other_hash != reference_hash:
                return self.fail(
                    f"equal objects have different hashes: {reference_hash} != {other_hash}",
                    member=member,
                )
            if not equal:
                unequal_hashes.append(other_hash)

        if len(unequal_hashes) + 1 >= MIN_COLLISION_SAMPLE and all(
            h == reference_hash for h in unequal_hashes
        ):
            get_logger().warning(
                f"All {len(unequal_hashes) + 1} unequal samples of {context.name} "
                f"hash to {reference_hash}",
                category="hash",
            )
        return self.ok()


__all__ = ["HashCoherenceChecker", "MIN_COLLISION_SAMPLE"]

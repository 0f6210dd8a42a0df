"""String representation."""

from __future__ import annotations

from eqverify.checkers.base import Checker, CheckContext, CheckerId, CheckerResult, guarded


class StringRepresentationChecker(Checker):
    """``repr`` and ``str`` must not raise on synthesized instances."""

    checker_id = CheckerId.STRING_REPRESENTATION
    description = "repr() and str() succeed"

    def check(self, context: CheckContext) -> CheckerResult:
        synth = context.synthesizer
        descriptor = context.descriptor
        for values in (None, synth.black_values(descriptor)):
            instance = synth.synthesize(descriptor, values)
            for render in (repr, str):
                _, error = guarded(lambda: render(instance.value))
                if error is not None:
                    return self.raised(f"{render.__name__}()", error)
        return self.ok()


__all__ = ["StringRepresentationChecker"]

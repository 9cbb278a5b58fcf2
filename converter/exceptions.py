class ConversionError(Exception):
    """Base class for everything the upload pipeline raises."""


class NoValidFiles(ConversionError):
    """The request carried no genuine file parts."""


class AllConversionsFailed(ConversionError):
    """Every attempted file failed; `outcomes` holds the per-file details."""

    def __init__(self, outcomes):
        super().__init__(f"all {len(outcomes)} conversion(s) failed")
        self.outcomes = list(outcomes)


class SpawnFailure(ConversionError):
    """The transcoder process could not be started."""


class TranscodeFailure(ConversionError):
    def __init__(self, exit_code: int):
        super().__init__(f"ffmpeg exited with code {exit_code}")
        self.exit_code = exit_code


class TranscodeTimeout(ConversionError):
    def __init__(self, seconds: float):
        super().__init__(f"ffmpeg did not finish within {seconds:g}s")
        self.seconds = seconds

from .sizing import calculate_tar_size, entry_size
from .packer import archive_tree, create_tar, create_tar_gz, PackResult
from .expander import TarGzExpander, ExpandResult, safe_target

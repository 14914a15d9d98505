"""
vm_abi.cli
----------

Command-line entrypoint, exposed as the `vm-abi` console script
(-> vm_abi.cli.abi:main).
"""

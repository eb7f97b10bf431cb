"""Solidity sources shared by the test suite."""


WALLET_SOURCE = """\
// SPDX-License-Identifier: MIT
pragma solidity ^0.8.0;

contract Wallet {
    bytes public pubKey;
    address public owner;

    function verify(bytes32 hash, uint8 v, bytes32 r, bytes32 s) public view returns (bool) {
        address signer = ecrecover(hash, v, r, s);
        return signer == owner;
    }
}
"""

CLEAN_SOURCE = """\
pragma solidity ^0.8.0;

contract Counter {
    uint256 public count;

    // ecrecover(hash, v, r, s) is only mentioned in this comment
    function increment() public {
        count += 1;
    }
}
"""

TRIPLE_ECRECOVER_SOURCE = """\
pragma solidity ^0.8.0;

contract Verifier {
    function first(bytes32 h, uint8 v, bytes32 r, bytes32 s) public pure returns (address) {
        return ecrecover(h, v, r, s);
    }

    function second(bytes32 h, uint8 v, bytes32 r, bytes32 s) public pure returns (address) {
        return ecrecover(h, v, r, s);
    }

    function third(bytes32 h, uint8 v, bytes32 r, bytes32 s) public pure returns (address) {
        return ecrecover(h, v, r, s);
    }
}
"""

KEY_FIELDS_SOURCE = """\
pragma solidity ^0.8.0;

contract Registry {
    bytes32 public publicKeyHash;
    bytes internal sessionKey;
    bytes32 public keystone;
    uint256 public pubCount;
    bytes32 public rootHash;

    function register(bytes memory newPubKey) public {
        bytes32 derivedKey = keccak256(newPubKey);
        rootHash = derivedKey;
    }
}
"""

LIBRARY_CALL_SOURCE = """\
pragma solidity ^0.8.0;

contract Delegating {
    function check(bytes32 h, uint8 v, bytes32 r, bytes32 s) public pure returns (address) {
        return SigLib.ecrecover(h, v, r, s);
    }
}
"""

RECOVERABLE_SOURCE = """\
pragma solidity ^0.8.0;

contract Sloppy {
    bytes public pubKey;;

    function noop() public {
    }
}
"""

GARBAGE_SOURCE = "}}}} ))) ;;; }}"

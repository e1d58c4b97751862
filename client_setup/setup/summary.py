from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from client_setup.config.network import (
    CHAINLINK_UI_URL,
    NODE_MIN_FUNDING_ETH,
    REQUEST_FEE_LINK,
    get_chain_config,
    get_faucet_url,
)

INFO_DIR_NAME = "info"
INFO_FILE_NAME = "client_contract_info.txt"
REQUEST_SCRIPT = Path("scripts") / "create_request.js"
NOT_RECORDED = "(not recorded)"


@dataclass
class DeploymentSummary:
    client_address: str
    operator_address: str
    job_id: str
    job_id_no_hyphens: str
    contract_name: str
    network: str
    source_dir: Path
    build_dir: Path

    @property
    def address_label(self) -> str:
        return self.client_address or NOT_RECORDED

    @property
    def request_script(self) -> Path:
        return self.source_dir / REQUEST_SCRIPT


def funding_instructions(s: DeploymentSummary) -> str:
    chain = get_chain_config(s.network)
    net = chain["name"]
    link_faucet = get_faucet_url(s.network, "link") or "your LINK provider"
    native_faucet = get_faucet_url(s.network, "native") or f"a {net} faucet"
    explorer = chain["explorer"]["name"]
    lines = [
        "Contract Funding Instructions",
        "=============================",
        "1. Fund your wallet with LINK tokens:",
        f"   - Ensure the wallet you use to call the client contract has {net} LINK tokens.",
        f"   - Get LINK from the Chainlink Faucet: {link_faucet}",
        "2. Approve the client contract to spend your LINK:",
        f"   - You must approve the client contract ({s.address_label}) to spend LINK from your wallet.",
        f"   - Approve an amount sufficient for the requests you plan to make (Fee is {REQUEST_FEE_LINK} LINK per request).",
        f"   - You can use a block explorer (like {explorer}) or the example script in the original client source:",
        f"     node {s.request_script} (This script includes an approval step)",
        "",
        f"3. Fund your Chainlink node with {net} {chain['currency']}:",
        f"   - Your Chainlink node needs {net} {chain['currency']} to pay for gas when fulfilling requests",
        f"   - Get {net} {chain['currency']} from faucets: {native_faucet}",
        f"   - Find your node's address at: {CHAINLINK_UI_URL} -> Key Management -> ETH Keys",
        f"   - Send at least {NODE_MIN_FUNDING_ETH} {net} {chain['currency']} to your node's address",
        "",
        "4. Testing the contract:",
        f"   - The deployed client contract ({s.address_label}) should now be compatible with the operator contract",
        f"   - Use the external adapter interface or the example script ({s.request_script}) to make requests",
        "   - Check the Chainlink node UI for job runs and their status",
    ]
    return "\n".join(lines)


def render_info(s: DeploymentSummary) -> str:
    chain = get_chain_config(s.network)
    net = chain["name"]
    currency = chain["currency"]
    return f"""Client Contract Information
===========================

Deployed Client Contract Address: {s.address_label}
Operator Contract Address: {s.operator_address}
Job ID (Full): {s.job_id}
Job ID (Used in Contract): {s.job_id_no_hyphens}
Network: {net} ({s.network})

Deployment Source: Temporary copy from {s.source_dir}
Deployment Build Artifacts: {s.build_dir} (may be cleaned up)

Funding Requirements:
1. User Wallet Funding & Approval:
   - Ensure your calling wallet has {net} LINK tokens (Faucet: {get_faucet_url(s.network, "link") or "n/a"}).
   - Approve the Deployed Client Contract ({s.address_label}) to spend LINK from your wallet.
   - Fee per request: {REQUEST_FEE_LINK} LINK. Approve enough for expected usage.

2. Chainlink Node Funding:
   - Your node needs {net} {currency} to pay for transaction gas.
   - Get {net} {currency} from: {get_faucet_url(s.network, "native") or "n/a"}
   - Find your node's address in the Chainlink UI: Key Management -> ETH Keys
   - Send at least {NODE_MIN_FUNDING_ETH} {net} {currency} to your node's address.

Testing the Setup:
1. Ensure your calling wallet has LINK and has approved the deployed client contract ({s.address_label}).
2. Ensure the Chainlink node wallet is funded with {net} {currency}.
3. Make a request to the client contract (e.g., using the example script: node {s.request_script}).
4. Monitor job runs in the Chainlink UI.

About the Client Contract:
The client contract ({s.contract_name}) deployed at {s.address_label} was configured
to interact with the deployed Operator contract ({s.operator_address})
and the specified Chainlink job ({s.job_id} / {s.job_id_no_hyphens}).
It uses a user-funded LINK model for requests.
"""


def write_info_file(installer_dir: str | Path, summary: DeploymentSummary) -> Path:
    info_dir = Path(installer_dir) / INFO_DIR_NAME
    info_dir.mkdir(parents=True, exist_ok=True)
    info_file = info_dir / INFO_FILE_NAME
    info_file.write_text(render_info(summary))
    return info_file

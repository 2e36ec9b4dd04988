# Licensed under the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License. You may obtain
# a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations
# under the License.

LOG_FILE = '/var/log/cfdock.log'

DIRECTOR_IP = '10.245.0.2'
NETWORK_CIDR = '10.245.0.0/16'
NETWORK_GW = '10.245.0.1'
NETWORK_NAME = 'cf-network'
BRIDGE_NAME = 'cf-br0'
DIRECTOR_NAME = 'bosh-docker'
ENVIRONMENT_ALIAS = 'docker'
DEPLOYMENT_NAME = 'cf'
DOCKER_SOCKET = '/var/run/docker.sock'
DOCKER_HOST = 'unix://' + DOCKER_SOCKET
WORKSPACE = 'workspace'

DNS_SERVERS = ['8.8.8.8', '8.8.4.4']

BOSH_DEPLOYMENT_REPO = 'https://github.com/cloudfoundry/bosh-deployment.git'
CF_DEPLOYMENT_REPO = 'https://github.com/cloudfoundry/cf-deployment.git'

DIRECTOR_OPS_FILES = [
    'docker/cpi.yml',
    'uaa.yml',
    'credhub.yml',
    'jumpbox-user.yml',
]
CF_OPS_FILES = [
    'operations/bosh-lite.yml',
    'operations/use-compiled-releases.yml',
]

BOSH_CLI_VERSION = '7.8.6'
BOSH_CLI_URL = ('https://github.com/cloudfoundry/bosh-cli/releases/download/'
                'v{version}/bosh-cli-{version}-{platform}-amd64')
CF_CLI_URL = ('https://packages.cloudfoundry.org/stable?release={release}'
              '&version=v8&source=github')
INSTALL_DIR = '/usr/local/bin'

STEMCELL_URL = ('https://bosh.io/d/stemcells/'
                'bosh-warden-boshlite-{os}-go_agent?v={version}')
FALLBACK_STEMCELL_URL = ('https://bosh.io/d/stemcells/'
                         'bosh-warden-boshlite-ubuntu-jammy-go_agent')

READY_ATTEMPTS = 30
READY_INTERVAL = 10

MIN_MEMORY_GB = 8

ADMIN_USER = 'admin'
CREDHUB_CLIENT = 'credhub-admin'
CREDHUB_PORT = 8844

CONTAINER_PREFIXES = ('bosh-', 'cf-')

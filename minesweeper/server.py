"""Flask server for Minesweeper game."""
import asyncio
import logging
from datetime import datetime
from flask import Flask, request, jsonify
from flask_cors import CORS
from temporalio.client import Client, WorkflowUpdateFailedError
from temporalio.service import RPCError, RPCStatusCode
import uuid

from minesweeper.best_times import BestTimeStore, JsonFileSettings, format_best_time
from minesweeper.client_provider import get_temporal_client
from minesweeper.config import Settings
from minesweeper.types import (
    DIFFICULTY_PRESETS,
    DEFAULT_DIFFICULTY,
    MOVE_ACTIONS,
    Difficulty,
    GameConfig,
    GameState,
    MoveRequest,
)
from minesweeper.workflows import MinesweeperWorkflow

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)

# Global references, set up in main() or by tests
temporal_client: Client | None = None
settings: Settings = Settings.from_env()
best_time_store: BestTimeStore | None = None


def serialize_game_state(game_state: GameState | None):
    """Convert game state to JSON-serializable format."""
    if not game_state:
        return None

    cells = []
    for row in game_state.cells:
        cells.append([{
            'row': cell.row,
            'col': cell.col,
            'state': cell.state.value,
            'adjacentMines': cell.adjacent_mines,
            'isMine': cell.is_mine,
        } for cell in row])

    return {
        'id': game_state.id,
        'difficulty': game_state.difficulty.value,
        'board': {
            'cells': cells,
            'rows': game_state.rows,
            'columns': game_state.columns,
            'bombQuantity': game_state.bomb_quantity,
        },
        'status': game_state.status.value,
        'startTime': game_state.start_time.isoformat() if game_state.start_time else None,
        'endTime': game_state.end_time.isoformat() if game_state.end_time else None,
        'elapsedSeconds': game_state.elapsed_seconds,
        'flagsRemaining': game_state.flags_remaining,
        'cellsRevealed': game_state.cells_revealed,
        'bestTime': game_state.best_time,
        'newBestTime': game_state.new_best_time,
    }


def parse_difficulty(data) -> Difficulty | None:
    """Read the difficulty tier from a request body, raising ValueError if unknown."""
    if not isinstance(data, dict) or data.get('difficulty') is None:
        return None
    return Difficulty(str(data['difficulty']).upper())


def get_best_time_store() -> BestTimeStore:
    global best_time_store
    if best_time_store is None:
        best_time_store = BestTimeStore(JsonFileSettings(settings.resolve_best_times_path()))
    return best_time_store


async def query_with_retry(handle, max_retries=5):
    """Query with retry logic for workflow initialization."""
    for i in range(max_retries):
        game_state = await handle.query(MinesweeperWorkflow.get_game_state_query)
        if game_state is not None:
            return game_state
        if i < max_retries - 1:
            logger.info(f"Game not ready yet, retrying in {(i + 1) * 100}ms...")
            await asyncio.sleep((i + 1) * 0.1)
    raise RuntimeError("Game did not initialize in time")


def is_not_found(error: Exception) -> bool:
    return isinstance(error, RPCError) and error.status == RPCStatusCode.NOT_FOUND


def is_coordinate(value) -> bool:
    # bool is an int subclass, but true/false are not cell indices
    return isinstance(value, int) and not isinstance(value, bool)


@app.route('/api/games', methods=['POST'])
def create_game():
    """Create a new game."""
    try:
        config = GameConfig(difficulty=parse_difficulty(request.get_json(silent=True)) or DEFAULT_DIFFICULTY)
    except ValueError:
        return jsonify({'error': 'Invalid game configuration'}), 400

    try:
        game_id = str(uuid.uuid4())

        async def start_workflow():
            handle = await temporal_client.start_workflow(
                MinesweeperWorkflow.run,
                args=[game_id, config],
                id=game_id,
                task_queue=settings.task_queue,
            )
            return await query_with_retry(handle)

        game_state = asyncio.run(start_workflow())
        return jsonify({'gameState': serialize_game_state(game_state)})

    except Exception as error:
        logger.error(f"Error creating game: {error}")
        return jsonify({'error': 'Failed to create game'}), 500


@app.route('/api/games/<game_id>', methods=['GET'])
def get_game_state(game_id):
    """Get game state."""
    try:
        async def query_game():
            handle = temporal_client.get_workflow_handle(game_id)
            return await query_with_retry(handle)

        game_state = asyncio.run(query_game())
        return jsonify({'gameState': serialize_game_state(game_state)})

    except Exception as error:
        logger.error(f"Error getting game state: {error}")
        if is_not_found(error):
            return jsonify({'error': 'Game not found'}), 404
        return jsonify({'error': 'Failed to get game state'}), 500


@app.route('/api/games/<game_id>/moves', methods=['POST'])
def make_move(game_id):
    """Make a move."""
    data = request.get_json(silent=True)

    # Validate move request
    if not isinstance(data, dict) or \
       not is_coordinate(data.get('row')) or \
       not is_coordinate(data.get('col')) or \
       data.get('action') not in MOVE_ACTIONS:
        return jsonify({'error': 'Invalid move request'}), 400

    move_request = MoveRequest(
        row=data['row'],
        col=data['col'],
        action=data['action']
    )

    try:
        async def execute_move():
            handle = temporal_client.get_workflow_handle(game_id)
            return await handle.execute_update(
                MinesweeperWorkflow.make_move_update,
                move_request,
            )

        game_state = asyncio.run(execute_move())
        return jsonify({'gameState': serialize_game_state(game_state)})

    except WorkflowUpdateFailedError as error:
        logger.error(f"Move rejected: {error.cause or error}")
        return jsonify({'error': str(error.cause or error)}), 400
    except Exception as error:
        logger.error(f"Error making move: {error}")
        if is_not_found(error):
            return jsonify({'error': 'Game not found'}), 404
        return jsonify({'error': 'Failed to make move'}), 500


@app.route('/api/games/<game_id>/restart', methods=['POST'])
def restart_game(game_id):
    """Restart game."""
    try:
        config = GameConfig(difficulty=parse_difficulty(request.get_json(silent=True)))
    except ValueError:
        return jsonify({'error': 'Invalid game configuration'}), 400

    try:
        async def execute_restart():
            handle = temporal_client.get_workflow_handle(game_id)
            return await handle.execute_update(
                MinesweeperWorkflow.restart_game_update,
                config,
            )

        game_state = asyncio.run(execute_restart())
        return jsonify({'gameState': serialize_game_state(game_state)})

    except WorkflowUpdateFailedError as error:
        logger.error(f"Restart rejected: {error.cause or error}")
        return jsonify({'error': str(error.cause or error)}), 400
    except Exception as error:
        logger.error(f"Error restarting game: {error}")
        if is_not_found(error):
            return jsonify({'error': 'Game not found'}), 404
        return jsonify({'error': 'Failed to restart game'}), 500


@app.route('/api/games/<game_id>/close', methods=['POST'])
def close_game(game_id):
    """Close game."""
    try:
        async def send_close():
            handle = temporal_client.get_workflow_handle(game_id)
            await handle.signal(MinesweeperWorkflow.close_game_signal)

        asyncio.run(send_close())
        return jsonify({'closed': True})

    except Exception as error:
        logger.error(f"Error closing game: {error}")
        if is_not_found(error):
            return jsonify({'error': 'Game not found'}), 404
        return jsonify({'error': 'Failed to close game'}), 500


@app.route('/api/difficulties', methods=['GET'])
def list_difficulties():
    """List the difficulty presets."""
    return jsonify({
        'default': DEFAULT_DIFFICULTY.value,
        'difficulties': [{
            'difficulty': preset.difficulty.value,
            'rows': preset.rows,
            'columns': preset.columns,
            'bombQuantity': preset.bomb_quantity,
            'label': str(preset),
        } for preset in DIFFICULTY_PRESETS.values()],
    })


@app.route('/api/best-times', methods=['GET'])
def get_best_times():
    """Best time recorded for every difficulty."""
    try:
        best_times = get_best_time_store().best_times()
    except Exception as error:
        logger.error(f"Error reading best times: {error}")
        return jsonify({'error': 'Failed to read best times'}), 500

    return jsonify({
        'bestTimes': {
            difficulty.value: {
                'seconds': seconds,
                'display': format_best_time(seconds),
            }
            for difficulty, seconds in best_times.items()
        }
    })


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({
        'status': 'OK',
        'timestamp': datetime.now().isoformat()
    })


async def initialize_client():
    """Initialize Temporal client."""
    global temporal_client
    temporal_client = await get_temporal_client(settings)
    logger.info("Connected to Temporal server")


def main():
    """Start the Flask server."""
    try:
        asyncio.run(initialize_client())

        logger.info(f"Minesweeper server running on http://localhost:{settings.port}")
        logger.info("Make sure to start the Temporal worker in another terminal: python -m minesweeper.worker")

        app.run(host='0.0.0.0', port=settings.port, debug=False)

    except Exception as error:
        logger.error(f"Failed to start server: {error}")
        exit(1)


if __name__ == "__main__":
    main()
